"""Prerequisite checks run before touching a cluster."""

import shutil
import subprocess
from typing import Iterable, List

from ..aws import EksClient
from ..errors import PrerequisiteError
from ..k8s import K8sClient
from ..utils.logger import get_logger

logger = get_logger(__name__)

REQUIRED_TOOLS = ("aws", "kubectl")


def check_tools(tools: Iterable[str] = REQUIRED_TOOLS) -> None:
    """Fail if any required CLI tool is missing from PATH. Makes no remote calls."""
    missing: List[str] = [tool for tool in tools if shutil.which(tool) is None]
    if missing:
        raise PrerequisiteError(f"Required tools not installed: {', '.join(missing)}")
    logger.debug(f"Required tools present: {', '.join(tools)}")


class PrerequisiteChecker:
    """Verifies tools, credentials and cluster reachability, in that order."""

    def __init__(self, eks: EksClient, k8s_factory=K8sClient, tools: Iterable[str] = REQUIRED_TOOLS):
        self.eks = eks
        self.k8s_factory = k8s_factory
        self.tools = tuple(tools)

    def update_kubeconfig(self) -> None:
        cmd = [
            "aws",
            "eks",
            "update-kubeconfig",
            "--name",
            self.eks.cluster_name,
            "--region",
            self.eks.region,
            "--alias",
            self.eks.cluster_name,
        ]
        logger.debug(f"Executing: {' '.join(cmd)}")
        try:
            subprocess.run(cmd, capture_output=True, text=True, check=True)
        except subprocess.CalledProcessError as e:
            raise PrerequisiteError(
                f"Failed to update kubeconfig for cluster {self.eks.cluster_name}: {e.stderr}"
            ) from e

    def check(self) -> K8sClient:
        """Run every check and return a kubectl client bound to the cluster context."""
        logger.info("Checking prerequisites...")
        check_tools(self.tools)

        identity = self.eks.caller_identity()
        logger.debug(f"AWS identity: {identity.get('Arn')}")

        if not self.eks.cluster_exists():
            raise PrerequisiteError(
                f"Cluster {self.eks.cluster_name} does not exist in region {self.eks.region}"
            )

        self.update_kubeconfig()

        k8s = self.k8s_factory(context=self.eks.cluster_name)
        if not k8s.cluster_reachable():
            raise PrerequisiteError(f"Cannot connect to cluster {self.eks.cluster_name}")

        logger.info("Prerequisites check passed")
        return k8s
