"""Test run settings and config file loading."""

import pytest
from pathlib import Path

from clusterops.config import (
    RunSettings,
    default_config_file,
    load_cluster_config,
    parse_choice,
    resolve_config_file,
    validate_target_version,
)
from clusterops.errors import InputValidationError
from clusterops.model import Environment, UpdateType


class TestRunSettings:
    def test_defaults_derived_from_environment(self):
        settings = RunSettings.from_options("staging")

        assert settings.environment == Environment.STAGING
        assert settings.cluster_name == "staging-eks"
        assert settings.region == "ap-southeast-2"

    def test_explicit_values(self):
        settings = RunSettings.from_options(
            "dev", "my-cluster", "us-east-1", poll_interval=5, poll_timeout=60
        )

        assert settings.cluster_name == "my-cluster"
        assert settings.region == "us-east-1"
        assert settings.poll_interval == 5
        assert settings.poll_timeout == 60

    def test_invalid_environment(self):
        with pytest.raises(InputValidationError, match="Invalid environment: qa"):
            RunSettings.from_options("qa")


class TestParsing:
    def test_parse_choice(self):
        assert parse_choice(UpdateType, "k8s-version", "update type") == UpdateType.K8S_VERSION

    def test_parse_choice_lists_options(self):
        with pytest.raises(InputValidationError) as exc:
            parse_choice(UpdateType, "everything", "update type")

        assert "Invalid update type: everything" in str(exc.value)
        assert "all, k8s-version, nodegroups, addons, config" in str(exc.value)

    @pytest.mark.parametrize("version", ["1.29", "1.30", "2.0"])
    def test_valid_target_versions(self, version):
        assert validate_target_version(version) == version

    @pytest.mark.parametrize("version", ["1.29.1", "v1.29", "latest", "1"])
    def test_invalid_target_versions(self, version):
        with pytest.raises(InputValidationError, match="Invalid target version format"):
            validate_target_version(version)

    def test_missing_target_version(self):
        assert validate_target_version(None) is None
        assert validate_target_version("") is None


class TestConfigFile:
    def test_default_path(self):
        assert default_config_file(Environment.DEV) == Path("cluster-config/dev-cluster.yaml")

    def test_resolve_missing_file(self, tmp_path):
        with pytest.raises(InputValidationError, match="Cluster configuration file not found"):
            resolve_config_file(tmp_path / "missing.yaml", Environment.DEV)

    def test_resolve_existing_file(self, tmp_path):
        path = tmp_path / "dev-cluster.yaml"
        path.write_text("metadata:\n  name: dev-eks\n")
        assert resolve_config_file(path, Environment.DEV) == path

    def test_load_cluster_config(self, tmp_path):
        path = tmp_path / "dev-cluster.yaml"
        path.write_text(
            "apiVersion: eksctl.io/v1alpha5\n"
            "kind: ClusterConfig\n"
            "metadata:\n"
            "  name: dev-eks\n"
            "  region: ap-southeast-2\n"
            "  version: '1.29'\n"
            "managedNodeGroups:\n"
            "  - name: ng-1\n"
            "    instanceType: m5.large\n"
            "    minSize: 2\n"
            "    maxSize: 5\n"
            "    desiredCapacity: 3\n"
            "    labels:\n"
            "      role: worker\n"
        )

        config = load_cluster_config(path)

        assert config.name == "dev-eks"
        assert config.version == "1.29"
        assert len(config.managed_nodegroups) == 1
        nodegroup = config.managed_nodegroups[0]
        assert nodegroup.instance_type == "m5.large"
        assert (nodegroup.min_size, nodegroup.max_size, nodegroup.desired_capacity) == (2, 5, 3)

    def test_load_config_without_name(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("metadata:\n  region: ap-southeast-2\n")

        with pytest.raises(InputValidationError, match="no metadata.name"):
            load_cluster_config(path)

    def test_load_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("metadata: [unclosed\n")

        with pytest.raises(InputValidationError, match="Cannot parse"):
            load_cluster_config(path)
