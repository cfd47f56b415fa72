"""Core business logic."""

from .backup import BackupManager
from .prerequisites import PrerequisiteChecker, check_tools
from .reporter import ValidationReporter
from .updater import UpdateSequencer
from .validator import ClusterValidator
from .waiter import StatusWaiter

__all__ = [
    "BackupManager",
    "PrerequisiteChecker",
    "check_tools",
    "ValidationReporter",
    "UpdateSequencer",
    "ClusterValidator",
    "StatusWaiter",
]
