"""Kubernetes version upgrade rules."""

from typing import Iterable, Optional, List
import re

from ..errors import InputValidationError


class UpgradeAdvisor:
    """Checks that a control plane version transition is one EKS accepts."""

    # EKS moves the control plane one minor version per update
    MAX_MINOR_STEP = 1

    def parse_version(self, version_string: str) -> Optional[tuple[int, int]]:
        """Parse Kubernetes version string to major.minor tuple."""
        # Remove 'v' prefix and extract major.minor
        match = re.match(r"v?(\d+)\.(\d+)", version_string or "")
        if match:
            return int(match.group(1)), int(match.group(2))
        return None

    def get_upgrade_path(self, current_version: str, target_version: str) -> List[str]:
        """Get the minor versions to pass through from current to target."""
        current = self.parse_version(current_version)
        target = self.parse_version(target_version)
        if not current or not target:
            return []

        path = []
        major, minor = current

        while (major, minor) < target:
            minor += 1
            path.append(f"{major}.{minor}")

        return path

    def check_target(self, current_version: str, target_version: str) -> List[str]:
        """Validate a control plane transition and return its path.

        An empty path means the cluster is already at the target.
        """
        current = self.parse_version(current_version)
        target = self.parse_version(target_version)
        if not current:
            raise InputValidationError(f"Cannot parse current cluster version: {current_version}")
        if not target:
            raise InputValidationError(f"Cannot parse target version: {target_version}")

        if target < current:
            raise InputValidationError(
                f"Target version {target_version} is older than current version "
                f"{current_version}; control plane downgrades are not supported"
            )

        path = self.get_upgrade_path(current_version, target_version)
        if len(path) > self.MAX_MINOR_STEP:
            raise InputValidationError(
                f"Cannot update from {current_version} to {target_version} in one step. "
                f"Upgrade path: {current_version} → {' → '.join(path)}"
            )
        return path

    def latest(self, versions: Iterable[str]) -> Optional[str]:
        """Return the newest parsable version, or None."""
        parsed = [(self.parse_version(v), v) for v in versions]
        parsed = [item for item in parsed if item[0]]
        if not parsed:
            return None
        return max(parsed)[1]
