"""Data models for clusterops."""

from .backup import BackupSnapshot
from .cluster import (
    AddonState,
    ClusterConfigFile,
    ClusterState,
    NodegroupConfig,
    NodegroupState,
    ResourceStatus,
)
from .options import Environment, UpdateType, ValidationType
from .report import ReportFormat, ValidationReport
from .update import StepOutcome, StepResult, UpdateRequest, UpdateSummary
from .validation import CheckOutcome, CheckResult, ValidationResults

__all__ = [
    "BackupSnapshot",
    "AddonState",
    "ClusterConfigFile",
    "ClusterState",
    "NodegroupConfig",
    "NodegroupState",
    "ResourceStatus",
    "Environment",
    "UpdateType",
    "ValidationType",
    "ReportFormat",
    "ValidationReport",
    "StepOutcome",
    "StepResult",
    "UpdateRequest",
    "UpdateSummary",
    "CheckOutcome",
    "CheckResult",
    "ValidationResults",
]
