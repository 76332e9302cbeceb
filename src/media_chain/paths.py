"""Path helpers for deterministic artifact layout."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .config import Settings


@dataclass
class OutputPaths:
    """Normalized output paths derived from settings."""

    root: Path

    @classmethod
    def from_settings(cls, settings: Settings) -> "OutputPaths":
        return cls(root=Path(settings.output_root))

    @property
    def speech_dir(self) -> Path:
        return self.root / "speech"

    @property
    def logs_dir(self) -> Path:
        return self.root / "logs"

    def ensure_all(self) -> None:
        for path in [self.root, self.speech_dir, self.logs_dir]:
            path.mkdir(parents=True, exist_ok=True)
