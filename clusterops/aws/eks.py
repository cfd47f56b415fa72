"""EKS and STS client wrapper."""

from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import PrerequisiteError, RemoteOperationError
from ..model.cluster import AddonState, ClusterState, NodegroupState, ResourceStatus
from ..upgrade import UpgradeAdvisor
from ..utils.logger import get_logger

logger = get_logger(__name__)

NOT_FOUND = "ResourceNotFoundException"

# Add-on whose catalog is used to discover supported cluster versions
VERSION_CATALOG_ADDON = "vpc-cni"

# SSM parameter holding the recommended AMI release for a node group AMI type
RELEASE_VERSION_PARAMETERS = {
    "AL2_x86_64": "/aws/service/eks/optimized-ami/{version}/amazon-linux-2/recommended/release_version",
    "AL2_x86_64_GPU": "/aws/service/eks/optimized-ami/{version}/amazon-linux-2-gpu/recommended/release_version",
    "AL2_ARM_64": "/aws/service/eks/optimized-ami/{version}/amazon-linux-2-arm64/recommended/release_version",
    "AL2023_x86_64_STANDARD": "/aws/service/eks/optimized-ami/{version}/amazon-linux-2023/x86_64/standard/recommended/release_version",
    "AL2023_ARM_64_STANDARD": "/aws/service/eks/optimized-ami/{version}/amazon-linux-2023/arm64/standard/recommended/release_version",
}


class EksClient:
    """Typed access to the EKS API for one cluster."""

    def __init__(self, cluster_name: str, region: str, eks=None, sts=None, ssm=None):
        self.cluster_name = cluster_name
        self.region = region
        if eks is None or sts is None or ssm is None:
            session = boto3.session.Session(region_name=region)
            eks = eks or session.client("eks")
            sts = sts or session.client("sts")
            ssm = ssm or session.client("ssm")
        self.eks = eks
        self.sts = sts
        self.ssm = ssm

    def _call(self, operation: str, **kwargs) -> Dict[str, Any]:
        """Invoke an EKS operation, converting SDK errors to RemoteOperationError."""
        logger.debug(f"eks.{operation}({kwargs})")
        try:
            return getattr(self.eks, operation)(**kwargs)
        except ClientError as e:
            message = e.response.get("Error", {}).get("Message", str(e))
            raise RemoteOperationError(f"eks {operation} failed: {message}") from e
        except BotoCoreError as e:
            raise RemoteOperationError(f"eks {operation} failed: {e}") from e

    @staticmethod
    def _is_not_found(error: RemoteOperationError) -> bool:
        cause = error.__cause__
        return isinstance(cause, ClientError) and (
            cause.response.get("Error", {}).get("Code") == NOT_FOUND
        )

    def caller_identity(self) -> Dict[str, Any]:
        """Return the STS identity, failing when credentials are unusable."""
        try:
            return self.sts.get_caller_identity()
        except (ClientError, BotoCoreError) as e:
            raise PrerequisiteError(
                f"Invalid AWS credentials. Please configure AWS credentials: {e}"
            ) from e

    # Cluster

    def describe_cluster_raw(self) -> Dict[str, Any]:
        return self._call("describe_cluster", name=self.cluster_name)["cluster"]

    def describe_cluster(self) -> ClusterState:
        cluster = self.describe_cluster_raw()
        return ClusterState(
            name=cluster.get("name", self.cluster_name),
            version=cluster.get("version", ""),
            status=ResourceStatus.parse(cluster.get("status")),
            endpoint=cluster.get("endpoint"),
            platform_version=cluster.get("platformVersion"),
        )

    def cluster_exists(self) -> bool:
        try:
            self.describe_cluster_raw()
            return True
        except RemoteOperationError as e:
            if self._is_not_found(e):
                return False
            raise

    def update_cluster_version(self, version: str) -> str:
        logger.info(f"Requesting control plane update of {self.cluster_name} to {version}")
        response = self._call("update_cluster_version", name=self.cluster_name, version=version)
        return response["update"]["id"]

    def latest_cluster_version(self) -> Optional[str]:
        """Newest Kubernetes version the add-on catalog supports."""
        response = self._call("describe_addon_versions", addonName=VERSION_CATALOG_ADDON)
        versions = set()
        for addon in response.get("addons", []):
            for addon_version in addon.get("addonVersions", []):
                for compat in addon_version.get("compatibilities", []):
                    if compat.get("clusterVersion"):
                        versions.add(compat["clusterVersion"])
        return UpgradeAdvisor().latest(versions)

    # Node groups

    def list_nodegroups(self) -> List[str]:
        names: List[str] = []
        kwargs: Dict[str, Any] = {"clusterName": self.cluster_name}
        while True:
            response = self._call("list_nodegroups", **kwargs)
            names.extend(response.get("nodegroups", []))
            token = response.get("nextToken")
            if not token:
                return names
            kwargs["nextToken"] = token

    def describe_nodegroup_raw(self, name: str) -> Dict[str, Any]:
        return self._call(
            "describe_nodegroup", clusterName=self.cluster_name, nodegroupName=name
        )["nodegroup"]

    def describe_nodegroup(self, name: str) -> NodegroupState:
        nodegroup = self.describe_nodegroup_raw(name)
        scaling = nodegroup.get("scalingConfig", {})
        return NodegroupState(
            name=nodegroup.get("nodegroupName", name),
            status=ResourceStatus.parse(nodegroup.get("status")),
            version=nodegroup.get("version"),
            release_version=nodegroup.get("releaseVersion"),
            ami_type=nodegroup.get("amiType"),
            instance_types=nodegroup.get("instanceTypes") or [],
            min_size=scaling.get("minSize"),
            max_size=scaling.get("maxSize"),
            desired_size=scaling.get("desiredSize"),
        )

    def latest_release_version(self, ami_type: Optional[str], kubernetes_version: str) -> Optional[str]:
        """Recommended AMI release for a node group, or None when it cannot be looked up."""
        template = RELEASE_VERSION_PARAMETERS.get(ami_type or "")
        if not template:
            return None
        name = template.format(version=kubernetes_version)
        try:
            return self.ssm.get_parameter(Name=name)["Parameter"]["Value"]
        except (ClientError, BotoCoreError) as e:
            logger.warning(f"Cannot read recommended AMI release from {name}: {e}")
            return None

    def update_nodegroup_version(self, name: str, version: Optional[str] = None) -> str:
        """Move a node group to a Kubernetes version, or to the latest AMI when version is None."""
        kwargs: Dict[str, Any] = {"clusterName": self.cluster_name, "nodegroupName": name}
        if version:
            kwargs["version"] = version
        logger.info(f"Requesting node group update of {name} (version={version or 'latest AMI'})")
        response = self._call("update_nodegroup_version", **kwargs)
        return response["update"]["id"]

    def update_nodegroup_scaling(
        self, name: str, min_size: int, max_size: int, desired_size: int
    ) -> str:
        logger.info(
            f"Requesting scaling update of {name}: min={min_size} max={max_size} desired={desired_size}"
        )
        response = self._call(
            "update_nodegroup_config",
            clusterName=self.cluster_name,
            nodegroupName=name,
            scalingConfig={"minSize": min_size, "maxSize": max_size, "desiredSize": desired_size},
        )
        return response["update"]["id"]

    # Add-ons

    def list_addons(self) -> List[str]:
        names: List[str] = []
        kwargs: Dict[str, Any] = {"clusterName": self.cluster_name}
        while True:
            response = self._call("list_addons", **kwargs)
            names.extend(response.get("addons", []))
            token = response.get("nextToken")
            if not token:
                return names
            kwargs["nextToken"] = token

    def describe_addon(self, name: str) -> Optional[AddonState]:
        """Return the add-on state, or None when it is not installed."""
        try:
            addon = self._call("describe_addon", clusterName=self.cluster_name, addonName=name)[
                "addon"
            ]
        except RemoteOperationError as e:
            if self._is_not_found(e):
                return None
            raise
        return AddonState(
            name=addon.get("addonName", name),
            version=addon.get("addonVersion", ""),
            status=ResourceStatus.parse(addon.get("status")),
        )

    def latest_addon_version(self, name: str, kubernetes_version: str) -> Optional[str]:
        response = self._call(
            "describe_addon_versions", addonName=name, kubernetesVersion=kubernetes_version
        )
        addons = response.get("addons", [])
        if not addons or not addons[0].get("addonVersions"):
            return None
        return addons[0]["addonVersions"][0]["addonVersion"]

    def update_addon(self, name: str, version: str) -> str:
        logger.info(f"Requesting add-on update of {name} to {version}")
        response = self._call(
            "update_addon",
            clusterName=self.cluster_name,
            addonName=name,
            addonVersion=version,
            resolveConflicts="OVERWRITE",
        )
        return response["update"]["id"]
