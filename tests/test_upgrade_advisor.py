"""Test upgrade advisor functionality."""

import pytest

from clusterops.errors import InputValidationError
from clusterops.upgrade.advisor import UpgradeAdvisor


class TestUpgradeAdvisor:
    def setup_method(self):
        """Set up test fixtures."""
        self.advisor = UpgradeAdvisor()

    def test_parse_version(self):
        """Test version parsing."""
        assert self.advisor.parse_version("v1.28.0") == (1, 28)
        assert self.advisor.parse_version("1.27") == (1, 27)
        assert self.advisor.parse_version("invalid") is None

    def test_get_upgrade_path_single_version(self):
        assert self.advisor.get_upgrade_path("1.27", "1.28") == ["1.28"]

    def test_get_upgrade_path_multi_version(self):
        assert self.advisor.get_upgrade_path("1.25", "1.28") == ["1.26", "1.27", "1.28"]

    def test_check_target_one_minor(self):
        assert self.advisor.check_target("1.28", "1.29") == ["1.29"]

    def test_check_target_same_version(self):
        assert self.advisor.check_target("1.29", "1.29") == []

    def test_check_target_rejects_downgrade(self):
        with pytest.raises(InputValidationError, match="downgrades are not supported"):
            self.advisor.check_target("1.29", "1.28")

    def test_check_target_rejects_skipping_versions(self):
        with pytest.raises(InputValidationError) as exc:
            self.advisor.check_target("1.27", "1.29")

        assert "1.27 → 1.28 → 1.29" in str(exc.value)

    def test_check_target_unparsable(self):
        with pytest.raises(InputValidationError, match="Cannot parse target version"):
            self.advisor.check_target("1.28", "next")

    def test_latest(self):
        assert self.advisor.latest(["1.9", "1.29", "1.28", "garbage"]) == "1.29"
        assert self.advisor.latest([]) is None
