"""Test validation report generation."""

import json
from datetime import datetime, timezone

import pytest
import yaml

from clusterops.core.reporter import ValidationReporter
from clusterops.model import ReportFormat, ValidationResults, ValidationType

FIXED_TIME = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


@pytest.fixture
def reporter():
    return ValidationReporter(clock=lambda: FIXED_TIME)


@pytest.fixture
def results():
    return (
        ValidationResults()
        .success("control-plane", "Cluster is in ACTIVE state")
        .success("nodes", "All 2 nodes are Ready")
        .warn("storage-classes", "No storage classes found")
    )


class TestValidationReporter:
    def test_build(self, reporter, results, settings):
        report = reporter.build(results, settings, ValidationType.HEALTH)

        assert report.cluster == "dev-eks"
        assert report.environment == "dev"
        assert report.validation_type == "health"
        assert report.results.passed == 2
        assert report.results.warnings == 1
        assert report.status == "PASSED"

    def test_build_strict(self, reporter, results, settings):
        report = reporter.build(results, settings, ValidationType.ALL, strict=True)
        assert report.status == "FAILED"

    def test_save_text(self, reporter, results, settings, tmp_path):
        report = reporter.build(results, settings, ValidationType.ALL)

        path = reporter.save(report, tmp_path, ReportFormat.TEXT)

        assert path.name == "cluster-validation-20240102-030405.txt"
        content = path.read_text()
        assert "Cluster: dev-eks" in content
        assert "Timestamp: 2024-01-02T03:04:05Z" in content
        assert "  Passed: 2" in content
        assert "  Warnings: 1" in content
        assert "[WARNING] storage-classes: No storage classes found" in content
        assert content.rstrip().endswith("Status: PASSED")

    def test_save_json(self, reporter, results, settings, tmp_path):
        report = reporter.build(results, settings, ValidationType.ALL)

        path = reporter.save(report, tmp_path / "reports", ReportFormat.JSON)

        assert path.suffix == ".json"
        data = json.loads(path.read_text())
        assert data["timestamp"] == "2024-01-02T03:04:05Z"
        assert data["results"] == {"passed": 2, "failed": 0, "warnings": 1}
        assert data["status"] == "PASSED"
        assert data["checks"][2] == {
            "name": "storage-classes",
            "outcome": "warning",
            "message": "No storage classes found",
        }

    def test_save_yaml(self, reporter, results, settings, tmp_path):
        report = reporter.build(results, settings, ValidationType.ALL, strict=True)

        path = reporter.save(report, tmp_path, ReportFormat.YAML)

        assert path.suffix == ".yaml"
        data = yaml.safe_load(path.read_text())
        assert data["strict"] is True
        assert data["status"] == "FAILED"
        assert len(data["checks"]) == 3
