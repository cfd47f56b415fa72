"""Kubernetes client wrapper."""

import subprocess
import json
from typing import List, Tuple, Optional, Dict, Any

from ..errors import PrerequisiteError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class K8sClient:
    """Wrapper for kubectl commands."""

    def __init__(self, context: Optional[str] = None):
        self.context = context
        self._verify_kubectl()

    def _verify_kubectl(self):
        """Verify kubectl is available."""
        try:
            subprocess.run(
                ["kubectl", "version", "--client", "-o", "json"],
                capture_output=True,
                text=True,
                check=True,
            )
            logger.debug("kubectl verified successfully")
        except FileNotFoundError:
            raise PrerequisiteError("kubectl command not found. Please install kubectl.")
        except subprocess.CalledProcessError:
            logger.warning("kubectl verification failed")

    def _build_command(self, args: List[str]) -> List[str]:
        """Build kubectl command with context."""
        cmd = ["kubectl"]

        if self.context:
            cmd.extend(["--context", self.context])

        cmd.extend(args)
        return cmd

    def execute(self, args: List[str], timeout: Optional[float] = None) -> Tuple[bool, str]:
        """Execute kubectl command and return success status and output."""
        cmd = self._build_command(args)
        logger.debug(f"Executing: {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, check=True, timeout=timeout
            )
            return True, result.stdout
        except subprocess.CalledProcessError as e:
            logger.debug(f"Command failed: {e.stderr}")
            return False, e.stderr or ""
        except subprocess.TimeoutExpired:
            logger.warning(f"Command timed out: {' '.join(cmd)}")
            return False, "timed out"

    def get_json(
        self,
        resource_type: str,
        name: Optional[str] = None,
        namespace: Optional[str] = None,
        all_namespaces: bool = False,
        selector: Optional[str] = None,
        field_selector: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """Get resource(s) as JSON."""
        args = ["get", resource_type]

        if name:
            args.append(name)

        if all_namespaces:
            args.append("--all-namespaces")
        elif namespace:
            args.extend(["-n", namespace])

        if selector:
            args.extend(["-l", selector])

        if field_selector:
            args.append(f"--field-selector={field_selector}")

        args.extend(["-o", "json"])

        success, output = self.execute(args)
        if success:
            try:
                return json.loads(output)
            except json.JSONDecodeError:
                logger.error("Failed to parse JSON output")
                return None
        return None

    def get_items(self, resource_type: str, **kwargs) -> Optional[List[Dict[str, Any]]]:
        """Return the items of a list query, or None when the query failed."""
        data = self.get_json(resource_type, **kwargs)
        if data is None:
            return None
        return data.get("items", [])

    def get_yaml(self, resource_type: str, all_namespaces: bool = False) -> Tuple[bool, str]:
        """Get resource(s) as raw YAML text, used for snapshots."""
        args = ["get", resource_type]
        if all_namespaces:
            args.append("--all-namespaces")
        args.extend(["-o", "yaml"])
        return self.execute(args)

    def namespace_exists(self, namespace: str) -> bool:
        success, _ = self.execute(["get", "namespace", namespace, "-o", "name"])
        return success

    def cluster_reachable(self) -> bool:
        success, _ = self.execute(["cluster-info"])
        return success

    def run_pod(
        self, name: str, image: str, command: List[str], timeout: int = 300
    ) -> Tuple[bool, str]:
        """Run a throwaway pod to completion and delete it."""
        args = [
            "run",
            name,
            f"--image={image}",
            "--restart=Never",
            "--rm",
            "-i",
            f"--pod-running-timeout={timeout}s",
            "--command",
            "--",
        ] + command
        return self.execute(args, timeout=timeout + 30)
