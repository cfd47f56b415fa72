"""Run option enums."""

from enum import Enum


class Environment(str, Enum):
    """Deployment environments."""

    DEV = "dev"
    STAGING = "staging"
    PRODUCTION = "production"


class UpdateType(str, Enum):
    """Update scopes."""

    ALL = "all"
    K8S_VERSION = "k8s-version"
    NODEGROUPS = "nodegroups"
    ADDONS = "addons"
    CONFIG = "config"

    @property
    def includes_control_plane(self) -> bool:
        return self in (UpdateType.ALL, UpdateType.K8S_VERSION)

    @property
    def includes_nodegroups(self) -> bool:
        return self in (UpdateType.ALL, UpdateType.NODEGROUPS)

    @property
    def includes_addons(self) -> bool:
        return self in (UpdateType.ALL, UpdateType.ADDONS)


class ValidationType(str, Enum):
    """Validation scopes."""

    ALL = "all"
    HEALTH = "health"
    PRE_UPDATE = "pre-update"
    POST_UPDATE = "post-update"
    ROLLBACK = "rollback"
