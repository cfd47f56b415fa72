"""Validation result models."""

from enum import Enum
from typing import List

from pydantic import BaseModel, Field

PASSED = "PASSED"
FAILED = "FAILED"


class CheckOutcome(str, Enum):
    """Result of a single check."""

    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class CheckResult(BaseModel):
    """One recorded check."""

    name: str
    outcome: CheckOutcome
    message: str


class ValidationResults(BaseModel):
    """Accumulator threaded through every check.

    Each recording method returns the accumulator so checks can end with
    ``return results.success(...)``.
    """

    checks: List[CheckResult] = Field(default_factory=list)

    def record(self, name: str, outcome: CheckOutcome, message: str) -> "ValidationResults":
        self.checks.append(CheckResult(name=name, outcome=outcome, message=message))
        return self

    def success(self, name: str, message: str) -> "ValidationResults":
        return self.record(name, CheckOutcome.SUCCESS, message)

    def warn(self, name: str, message: str) -> "ValidationResults":
        return self.record(name, CheckOutcome.WARNING, message)

    def error(self, name: str, message: str) -> "ValidationResults":
        return self.record(name, CheckOutcome.ERROR, message)

    def _count(self, outcome: CheckOutcome) -> int:
        return sum(1 for check in self.checks if check.outcome == outcome)

    @property
    def passed(self) -> int:
        return self._count(CheckOutcome.SUCCESS)

    @property
    def warnings(self) -> int:
        return self._count(CheckOutcome.WARNING)

    @property
    def failed(self) -> int:
        return self._count(CheckOutcome.ERROR)

    def status(self, strict: bool = False) -> str:
        """Overall status: any error fails, and under strict any warning fails."""
        if self.failed > 0:
            return FAILED
        if strict and self.warnings > 0:
            return FAILED
        return PASSED

    def is_success(self, strict: bool = False) -> bool:
        return self.status(strict) == PASSED
