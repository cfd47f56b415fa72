"""YAML exporter."""

import yaml
from pathlib import Path
from typing import Any

from ..utils.logger import get_logger
from .base import Exporter

logger = get_logger(__name__)


class YamlExporter(Exporter):
    """Export data as a YAML file."""

    def export(self, data: Any, filename: str) -> Path:
        filepath = self.output_dir / filename

        with open(filepath, "w") as f:
            yaml.safe_dump(self.clean(data), f, default_flow_style=False, sort_keys=False)

        logger.debug(f"Exported {filepath}")
        return filepath
