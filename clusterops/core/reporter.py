"""Validation report generator."""

import json
import yaml
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from ..model.report import ReportFormat, ResultCounts, ValidationReport
from ..model.validation import ValidationResults
from ..config import RunSettings
from ..model.options import ValidationType
from ..utils.logger import get_logger

logger = get_logger(__name__)

EXTENSIONS = {
    ReportFormat.TEXT: "txt",
    ReportFormat.JSON: "json",
    ReportFormat.YAML: "yaml",
}


class ValidationReporter:
    """Builds, formats and saves validation reports."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def build(
        self,
        results: ValidationResults,
        settings: RunSettings,
        validation_type: ValidationType,
        strict: bool = False,
    ) -> ValidationReport:
        return ValidationReport(
            cluster=settings.cluster_name,
            environment=settings.environment.value,
            region=settings.region,
            validation_type=validation_type.value,
            timestamp=self.clock(),
            strict=strict,
            results=ResultCounts(
                passed=results.passed, failed=results.failed, warnings=results.warnings
            ),
            status=results.status(strict),
            checks=list(results.checks),
        )

    def format(self, report: ValidationReport, output_format: ReportFormat) -> str:
        """Render a report in the requested format."""
        if output_format == ReportFormat.JSON:
            return json.dumps(self._as_dict(report), indent=2)
        elif output_format == ReportFormat.YAML:
            return yaml.safe_dump(self._as_dict(report), default_flow_style=False, sort_keys=False)
        else:
            return self._format_text_report(report)

    def save(self, report: ValidationReport, output_dir: Path, output_format: ReportFormat) -> Path:
        """Write the report to cluster-validation-<timestamp>.<ext> and return its path."""
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        stamp = report.timestamp.strftime("%Y%m%d-%H%M%S")
        report_path = output_dir / f"cluster-validation-{stamp}.{EXTENSIONS[output_format]}"

        with open(report_path, "w") as f:
            f.write(self.format(report, output_format))

        logger.info(f"Validation report generated: {report_path}")
        return report_path

    def _as_dict(self, report: ValidationReport) -> dict:
        data = report.model_dump(mode="json")
        data["timestamp"] = _iso_utc(report.timestamp)
        return data

    def _format_text_report(self, report: ValidationReport) -> str:
        """Format report as human-readable text."""
        lines = []
        lines.append("Cluster Validation Report")
        lines.append("=" * 25)
        lines.append("")
        lines.append(f"Cluster: {report.cluster}")
        lines.append(f"Environment: {report.environment}")
        lines.append(f"Region: {report.region}")
        lines.append(f"Validation Type: {report.validation_type}")
        lines.append(f"Timestamp: {_iso_utc(report.timestamp)}")
        lines.append(f"Strict Mode: {str(report.strict).lower()}")
        lines.append("")
        lines.append("Results:")
        lines.append(f"  Passed: {report.results.passed}")
        lines.append(f"  Failed: {report.results.failed}")
        lines.append(f"  Warnings: {report.results.warnings}")

        if report.checks:
            lines.append("")
            lines.append("Checks:")
            for check in report.checks:
                lines.append(f"  [{check.outcome.value.upper()}] {check.name}: {check.message}")

        lines.append("")
        lines.append(f"Status: {report.status}")
        return "\n".join(lines) + "\n"


def _iso_utc(timestamp: datetime) -> str:
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(timezone.utc)
    return timestamp.strftime("%Y-%m-%dT%H:%M:%SZ")
