"""Test backup snapshots."""

import json
from datetime import datetime, timezone

import pytest
import yaml

from clusterops.core.backup import BackupManager, latest_backup, missing_files, pointer_path
from clusterops.errors import RemoteOperationError
from clusterops.model.backup import REQUIRED_ROLLBACK_FILES, SNAPSHOT_FILES

FIXED_TIME = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


@pytest.fixture
def manager(mock_eks, mock_k8s, tmp_path):
    mock_eks.describe_cluster_raw.return_value = {
        "name": "dev-eks",
        "version": "1.28",
        "status": "ACTIVE",
        "ResponseMetadata": {"RequestId": "abc"},
    }
    mock_eks.describe_nodegroup_raw.return_value = {"nodegroupName": "ng-1", "status": "ACTIVE"}
    return BackupManager(mock_eks, mock_k8s, tmp_path / "backups", clock=lambda: FIXED_TIME)


class TestBackupManager:
    def test_create_writes_every_file(self, manager, tmp_path):
        snapshot = manager.create()

        expected = tmp_path / "backups" / "dev-eks-20240102-030405"
        assert snapshot.path == expected
        assert snapshot.files == SNAPSHOT_FILES
        for filename in SNAPSHOT_FILES:
            assert (expected / filename).is_file()

    def test_snapshot_contents(self, manager):
        snapshot = manager.create()

        cluster = yaml.safe_load((snapshot.path / "cluster-config.yaml").read_text())
        assert cluster["version"] == "1.28"
        assert "ResponseMetadata" not in cluster

        nodegroups = yaml.safe_load((snapshot.path / "nodegroups.yaml").read_text())
        assert nodegroups == [{"nodegroupName": "ng-1", "status": "ACTIVE"}]

        addons = json.loads((snapshot.path / "addons.json").read_text())
        assert addons == {"addons": ["vpc-cni", "coredns"]}

        assert (snapshot.path / "secrets.yaml").read_text().startswith("apiVersion: v1")

    def test_kubectl_snapshots(self, manager, mock_k8s):
        manager.create()

        calls = [(c[0][0], c[1]["all_namespaces"]) for c in mock_k8s.get_yaml.call_args_list]
        assert calls == [("nodes", False), ("configmaps", True), ("secrets", True)]

    def test_pointer_records_latest(self, manager, tmp_path):
        snapshot = manager.create()

        root = tmp_path / "backups"
        assert pointer_path(root, "dev-eks").read_text().strip() == str(snapshot.path)
        assert latest_backup(root, "dev-eks") == snapshot.path

    def test_kubectl_failure(self, manager, mock_k8s):
        mock_k8s.get_yaml.return_value = (False, "error: Unauthorized\n")

        with pytest.raises(RemoteOperationError, match="Failed to back up nodes: error: Unauthorized"):
            manager.create()


def test_latest_backup_without_pointer(tmp_path):
    assert latest_backup(tmp_path, "dev-eks") is None


def test_missing_files(backup_dir):
    assert missing_files(backup_dir) == []

    (backup_dir / "addons.json").unlink()
    assert missing_files(backup_dir, REQUIRED_ROLLBACK_FILES) == ["addons.json"]
