"""Test configuration and fixtures."""

import pytest
from unittest.mock import Mock
from typing import Dict, Any, List, Optional

from clusterops.aws import EksClient
from clusterops.config import RunSettings
from clusterops.k8s import K8sClient
from clusterops.model import (
    AddonState,
    ClusterState,
    Environment,
    NodegroupState,
    ResourceStatus,
)


def make_pod(
    name: str,
    phase: str = "Running",
    namespace: str = "kube-system",
    reason: Optional[str] = None,
) -> Dict[str, Any]:
    """Build a pod as returned by kubectl get pods -o json."""
    pod = {
        "metadata": {"name": name, "namespace": namespace},
        "status": {"phase": phase, "containerStatuses": []},
    }
    if reason:
        pod["status"]["containerStatuses"].append({"state": {"waiting": {"reason": reason}}})
    return pod


def make_node(name: str, ready: bool = True) -> Dict[str, Any]:
    """Build a node as returned by kubectl get nodes -o json."""
    return {
        "metadata": {"name": name},
        "status": {
            "conditions": [
                {"type": "MemoryPressure", "status": "False"},
                {"type": "Ready", "status": "True" if ready else "False"},
            ]
        },
    }


def make_nodegroup(
    name: str = "ng-1",
    status: ResourceStatus = ResourceStatus.ACTIVE,
    version: str = "1.28",
    release_version: str = "1.28.5-20240110",
) -> NodegroupState:
    return NodegroupState(
        name=name,
        status=status,
        version=version,
        release_version=release_version,
        ami_type="AL2_x86_64",
        instance_types=["m5.large"],
        min_size=1,
        max_size=3,
        desired_size=2,
    )


@pytest.fixture
def settings() -> RunSettings:
    """Settings with zero poll and settle delays."""
    return RunSettings(
        environment=Environment.DEV,
        cluster_name="dev-eks",
        region="ap-southeast-2",
        poll_interval=0,
        poll_max_interval=0,
        poll_timeout=5,
        settle_seconds=0,
    )


@pytest.fixture
def mock_eks():
    """Mock EKS client for a healthy 1.28 cluster with one node group."""
    eks = Mock(spec=EksClient)
    eks.cluster_name = "dev-eks"
    eks.region = "ap-southeast-2"

    eks.describe_cluster.return_value = ClusterState(
        name="dev-eks", version="1.28", status=ResourceStatus.ACTIVE
    )
    eks.list_nodegroups.return_value = ["ng-1"]
    eks.describe_nodegroup.return_value = make_nodegroup()
    eks.list_addons.return_value = ["vpc-cni", "coredns"]
    eks.describe_addon.return_value = AddonState(
        name="vpc-cni", version="v1.15.0-eksbuild.1", status=ResourceStatus.ACTIVE
    )
    eks.latest_addon_version.return_value = "v1.15.0-eksbuild.1"
    eks.latest_release_version.return_value = "1.28.5-20240110"
    eks.latest_cluster_version.return_value = "1.29"
    eks.update_cluster_version.return_value = "update-1"
    eks.update_nodegroup_version.return_value = "update-2"
    eks.update_addon.return_value = "update-3"
    eks.update_nodegroup_scaling.return_value = "update-4"
    return eks


@pytest.fixture
def mock_k8s():
    """Mock kubectl client."""
    k8s = Mock(spec=K8sClient)
    k8s.cluster_reachable.return_value = True
    k8s.namespace_exists.return_value = False
    k8s.get_items.return_value = []
    k8s.get_yaml.return_value = (True, "apiVersion: v1\nitems: []\nkind: List\n")
    k8s.run_pod.return_value = (True, "")
    return k8s


@pytest.fixture
def sample_nodes() -> List[Dict[str, Any]]:
    return [make_node("ip-10-0-1-1"), make_node("ip-10-0-1-2")]


@pytest.fixture
def backup_dir(tmp_path):
    """A complete backup directory."""
    path = tmp_path / "backups" / "dev-eks-20240102-030405"
    path.mkdir(parents=True)
    for filename in ("cluster-config.yaml", "nodegroups.yaml", "addons.json"):
        (path / filename).write_text("{}\n")
    return path
