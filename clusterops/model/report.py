"""Report-related models."""

from datetime import datetime
from enum import Enum
from typing import List

from pydantic import BaseModel, Field

from .validation import CheckResult


class ReportFormat(str, Enum):
    """Supported report formats."""

    TEXT = "text"
    JSON = "json"
    YAML = "yaml"


class ResultCounts(BaseModel):
    """Tally of check outcomes."""

    passed: int = 0
    failed: int = 0
    warnings: int = 0


class ValidationReport(BaseModel):
    """Complete validation report."""

    cluster: str
    environment: str
    region: str
    validation_type: str
    timestamp: datetime
    strict: bool = False
    results: ResultCounts
    status: str
    checks: List[CheckResult] = Field(default_factory=list)
