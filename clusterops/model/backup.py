"""Backup snapshot models."""

from datetime import datetime
from pathlib import Path
from typing import List

from pydantic import BaseModel, Field

CLUSTER_CONFIG_FILE = "cluster-config.yaml"
NODEGROUPS_FILE = "nodegroups.yaml"
ADDONS_FILE = "addons.json"
NODES_FILE = "nodes.yaml"
CONFIGMAPS_FILE = "configmaps.yaml"
SECRETS_FILE = "secrets.yaml"

SNAPSHOT_FILES = [
    CLUSTER_CONFIG_FILE,
    NODEGROUPS_FILE,
    ADDONS_FILE,
    NODES_FILE,
    CONFIGMAPS_FILE,
    SECRETS_FILE,
]

# Files a rollback cannot proceed without
REQUIRED_ROLLBACK_FILES = [CLUSTER_CONFIG_FILE, NODEGROUPS_FILE, ADDONS_FILE]


class BackupSnapshot(BaseModel):
    """A written backup directory."""

    cluster: str
    path: Path
    created_at: datetime
    files: List[str] = Field(default_factory=list)
