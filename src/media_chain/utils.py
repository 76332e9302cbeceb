"""Utility helpers for deterministic audio file names."""
from __future__ import annotations

import re
from pathlib import Path

SPEECH_PREFIX = "speech___"
FIXED_SUFFIX = "_fixed"


def speech_filename(text: str, max_words: int = 6) -> str:
    """File name derived from the first words of the spoken text."""
    cleaned = re.sub(r"[^a-z\s]", "", text.lower())
    words = cleaned.split(" ")[:max_words]
    return f"{SPEECH_PREFIX}{'_'.join(words)}.mp3"


def fixed_path(path: Path) -> Path:
    """Sibling path for the re-encoded copy: `name.mp3` -> `name_fixed.mp3`."""
    return path.with_name(f"{path.stem}{FIXED_SUFFIX}.mp3")
