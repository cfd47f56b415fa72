"""EKS resource state models."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class ResourceStatus(str, Enum):
    """Status values shared by EKS clusters, node groups and add-ons."""

    CREATING = "CREATING"
    ACTIVE = "ACTIVE"
    UPDATING = "UPDATING"
    DELETING = "DELETING"
    PENDING = "PENDING"
    FAILED = "FAILED"
    DEGRADED = "DEGRADED"
    CREATE_FAILED = "CREATE_FAILED"
    DELETE_FAILED = "DELETE_FAILED"
    UPDATE_FAILED = "UPDATE_FAILED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: Optional[str]) -> "ResourceStatus":
        """Map a raw API status string onto the enum."""
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_failed(self) -> bool:
        return self in FAILED_STATUSES


FAILED_STATUSES = {
    ResourceStatus.FAILED,
    ResourceStatus.DEGRADED,
    ResourceStatus.CREATE_FAILED,
    ResourceStatus.DELETE_FAILED,
    ResourceStatus.UPDATE_FAILED,
}


class ClusterState(BaseModel):
    """Control plane state as reported by describe-cluster."""

    name: str
    version: str
    status: ResourceStatus
    endpoint: Optional[str] = None
    platform_version: Optional[str] = None


class NodegroupState(BaseModel):
    """Managed node group state."""

    name: str
    status: ResourceStatus
    version: Optional[str] = None
    release_version: Optional[str] = None
    ami_type: Optional[str] = None
    instance_types: List[str] = Field(default_factory=list)
    min_size: Optional[int] = None
    max_size: Optional[int] = None
    desired_size: Optional[int] = None


class AddonState(BaseModel):
    """EKS managed add-on state."""

    name: str
    version: str
    status: ResourceStatus


class NodegroupConfig(BaseModel):
    """Managed node group as declared in an eksctl config file."""

    name: str
    instance_type: Optional[str] = Field(default=None, alias="instanceType")
    min_size: Optional[int] = Field(default=None, alias="minSize")
    max_size: Optional[int] = Field(default=None, alias="maxSize")
    desired_capacity: Optional[int] = Field(default=None, alias="desiredCapacity")

    class Config:
        populate_by_name = True
        extra = "ignore"


class ClusterConfigFile(BaseModel):
    """The parts of an eksctl ClusterConfig that updates act on."""

    name: str
    region: Optional[str] = None
    version: Optional[str] = None
    managed_nodegroups: List[NodegroupConfig] = Field(default_factory=list)
