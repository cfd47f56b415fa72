"""Update run models."""

from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field

from .options import UpdateType
from .validation import ValidationResults


class StepOutcome(str, Enum):
    """What an update step ended up doing."""

    SKIPPED = "skipped"
    DRY_RUN = "dry-run"
    COMPLETED = "completed"


class StepResult(BaseModel):
    """Result of one update step against one target."""

    scope: str
    target: str
    outcome: StepOutcome
    detail: str = ""


class UpdateSummary(BaseModel):
    """Everything an update run did."""

    cluster: str
    environment: str
    region: str
    update_type: str
    dry_run: bool = False
    version_before: Optional[str] = None
    version_after: Optional[str] = None
    target_version: Optional[str] = None
    backup_path: Optional[Path] = None
    steps: List[StepResult] = Field(default_factory=list)
    pre_checks: Optional[ValidationResults] = None
    post_checks: Optional[ValidationResults] = None

    def add(self, scope: str, target: str, outcome: StepOutcome, detail: str = "") -> StepResult:
        step = StepResult(scope=scope, target=target, outcome=outcome, detail=detail)
        self.steps.append(step)
        return step

    @property
    def completed(self) -> List[StepResult]:
        return [step for step in self.steps if step.outcome == StepOutcome.COMPLETED]


class UpdateRequest(BaseModel):
    """What the operator asked an update run to do."""

    update_type: UpdateType = UpdateType.ALL
    target_version: Optional[str] = None
    config_file: Optional[Path] = None
    dry_run: bool = False
    force: bool = False
    skip_backup: bool = False
    skip_validation: bool = False
