"""Run settings and cluster config file loading."""

import re
from enum import Enum
from pathlib import Path
from typing import Optional, Type, TypeVar

import yaml
from pydantic import BaseModel, ValidationError

from .errors import InputValidationError
from .model.cluster import ClusterConfigFile, NodegroupConfig
from .model.options import Environment
from .utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_REGION = "ap-southeast-2"
DEFAULT_ENVIRONMENT = Environment.PRODUCTION.value
CONFIG_DIR = Path("cluster-config")

TARGET_VERSION_PATTERN = re.compile(r"^\d+\.\d+$")

E = TypeVar("E", bound=Enum)


class RunSettings(BaseModel):
    """Resolved settings shared by every command."""

    environment: Environment
    cluster_name: str
    region: str = DEFAULT_REGION

    # Polling budget for remote status changes, in seconds
    poll_interval: float = 30.0
    poll_max_interval: float = 120.0
    poll_timeout: float = 3600.0

    # Delay before post-update checks
    settle_seconds: float = 30.0

    @classmethod
    def from_options(
        cls,
        environment: str,
        cluster_name: Optional[str] = None,
        region: Optional[str] = None,
        **overrides,
    ) -> "RunSettings":
        """Build settings from raw CLI values, deriving defaults from the environment."""
        env = parse_choice(Environment, environment, "environment")
        try:
            return cls(
                environment=env,
                cluster_name=cluster_name or default_cluster_name(env),
                region=region or DEFAULT_REGION,
                **overrides,
            )
        except ValidationError as e:
            raise InputValidationError(str(e)) from e


def default_cluster_name(environment: Environment) -> str:
    return f"{environment.value}-eks"


def default_config_file(environment: Environment) -> Path:
    return CONFIG_DIR / f"{environment.value}-cluster.yaml"


def parse_choice(enum_cls: Type[E], value: str, label: str) -> E:
    """Convert a raw string into an enum member or raise InputValidationError."""
    try:
        return enum_cls(value)
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        raise InputValidationError(f"Invalid {label}: {value}. Must be one of: {choices}")


def validate_target_version(version: Optional[str]) -> Optional[str]:
    """Check a target Kubernetes version has major.minor form."""
    if version is None or version == "":
        return None
    if not TARGET_VERSION_PATTERN.match(version):
        raise InputValidationError(
            f"Invalid target version format: {version}. Use format like 1.29"
        )
    return version


def resolve_config_file(config_file: Optional[Path], environment: Environment) -> Path:
    """Return the cluster config file path, failing if it does not exist."""
    path = Path(config_file) if config_file else default_config_file(environment)
    if not path.is_file():
        raise InputValidationError(f"Cluster configuration file not found: {path}")
    return path


def load_cluster_config(path: Path) -> ClusterConfigFile:
    """Load an eksctl ClusterConfig YAML file."""
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise InputValidationError(f"Cannot parse cluster configuration {path}: {e}") from e

    metadata = data.get("metadata") or {}
    if not metadata.get("name"):
        raise InputValidationError(f"Cluster configuration {path} has no metadata.name")

    nodegroups = []
    for item in data.get("managedNodeGroups") or []:
        try:
            nodegroups.append(NodegroupConfig(**item))
        except ValidationError as e:
            raise InputValidationError(f"Invalid managed node group in {path}: {e}") from e

    version = metadata.get("version")
    config = ClusterConfigFile(
        name=metadata["name"],
        region=metadata.get("region"),
        version=str(version) if version is not None else None,
        managed_nodegroups=nodegroups,
    )
    logger.debug(f"Loaded cluster config {config.name} from {path}")
    return config
