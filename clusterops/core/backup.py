"""Pre-update backup snapshots."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional

from ..aws import EksClient
from ..errors import RemoteOperationError
from ..exporters import JsonExporter, YamlExporter
from ..k8s import K8sClient
from ..model.backup import (
    ADDONS_FILE,
    CLUSTER_CONFIG_FILE,
    CONFIGMAPS_FILE,
    NODEGROUPS_FILE,
    NODES_FILE,
    REQUIRED_ROLLBACK_FILES,
    SECRETS_FILE,
    BackupSnapshot,
)
from ..utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_BACKUP_ROOT = Path("backups")
TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"

# kubectl resources captured as raw YAML: (resource, filename, all namespaces)
KUBECTL_SNAPSHOTS = [
    ("nodes", NODES_FILE, False),
    ("configmaps", CONFIGMAPS_FILE, True),
    ("secrets", SECRETS_FILE, True),
]


def pointer_path(root: Path, cluster_name: str) -> Path:
    return Path(root) / f"last-backup-{cluster_name}"


def latest_backup(root: Path, cluster_name: str) -> Optional[Path]:
    """Return the most recent backup recorded for a cluster, if any."""
    pointer = pointer_path(root, cluster_name)
    if not pointer.is_file():
        return None
    recorded = pointer.read_text().strip()
    return Path(recorded) if recorded else None


def missing_files(backup_dir: Path, required: List[str] = REQUIRED_ROLLBACK_FILES) -> List[str]:
    return [name for name in required if not (Path(backup_dir) / name).is_file()]


class BackupManager:
    """Writes write-once snapshots of cluster state before mutations."""

    def __init__(
        self,
        eks: EksClient,
        k8s: K8sClient,
        root: Path = DEFAULT_BACKUP_ROOT,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.eks = eks
        self.k8s = k8s
        self.root = Path(root)
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def create(self) -> BackupSnapshot:
        """Capture cluster, node group, add-on and in-cluster state."""
        cluster_name = self.eks.cluster_name
        created_at = self.clock()
        backup_dir = self.root / f"{cluster_name}-{created_at.strftime(TIMESTAMP_FORMAT)}"
        logger.info(f"Creating cluster backup in {backup_dir}")

        yaml_exporter = YamlExporter(backup_dir)
        json_exporter = JsonExporter(backup_dir)
        files = []

        yaml_exporter.export(self.eks.describe_cluster_raw(), CLUSTER_CONFIG_FILE)
        files.append(CLUSTER_CONFIG_FILE)

        nodegroups = [self.eks.describe_nodegroup_raw(name) for name in self.eks.list_nodegroups()]
        yaml_exporter.export(nodegroups, NODEGROUPS_FILE)
        files.append(NODEGROUPS_FILE)

        json_exporter.export({"addons": self.eks.list_addons()}, ADDONS_FILE)
        files.append(ADDONS_FILE)

        for resource, filename, all_namespaces in KUBECTL_SNAPSHOTS:
            success, output = self.k8s.get_yaml(resource, all_namespaces=all_namespaces)
            if not success:
                raise RemoteOperationError(f"Failed to back up {resource}: {output.strip()}")
            yaml_exporter.write_text(output, filename)
            files.append(filename)

        pointer = pointer_path(self.root, cluster_name)
        pointer.write_text(f"{backup_dir}\n")

        logger.info(f"Backup created in: {backup_dir}")
        return BackupSnapshot(
            cluster=cluster_name, path=backup_dir, created_at=created_at, files=files
        )
