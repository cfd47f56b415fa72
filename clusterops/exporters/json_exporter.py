"""JSON exporter."""

import json
from pathlib import Path
from typing import Any

from ..utils.logger import get_logger
from .base import Exporter

logger = get_logger(__name__)


class JsonExporter(Exporter):
    """Export data as a JSON file."""

    def export(self, data: Any, filename: str) -> Path:
        filepath = self.output_dir / filename

        with open(filepath, "w") as f:
            json.dump(self.clean(data), f, indent=2, default=str)

        logger.debug(f"Exported {filepath}")
        return filepath
