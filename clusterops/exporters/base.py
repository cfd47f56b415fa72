"""Base exporter class."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict

# Response fields that describe the API call rather than the resource
VOLATILE_FIELDS = ("ResponseMetadata",)


class Exporter(ABC):
    """Base class for snapshot exporters."""

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    @abstractmethod
    def export(self, data: Any, filename: str) -> Path:
        """Serialize data into output_dir/filename."""
        pass

    def write_text(self, text: str, filename: str) -> Path:
        """Write already-serialized output unchanged."""
        filepath = self.output_dir / filename
        with open(filepath, "w") as f:
            f.write(text)
        return filepath

    def clean(self, data: Any) -> Any:
        """Drop API bookkeeping fields from a response."""
        if isinstance(data, dict):
            return {k: self.clean(v) for k, v in data.items() if k not in VOLATILE_FIELDS}
        if isinstance(data, list):
            return [self.clean(item) for item in data]
        return data
