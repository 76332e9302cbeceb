"""Configuration loader with environment overrides."""
from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from .errors import ConfigMissing

DEFAULT_PATHS = [
    Path("config/config.json"),
    Path("config.json"),
]

DEFAULT_MUSIC_ENDPOINT = "https://suno-api-mocha-delta.vercel.app"
DEFAULT_SPEECH_MODEL = "eleven_english_v2"


@dataclass(frozen=True)
class Settings:
    """Immutable settings shared by every client, loaded once at startup."""

    openai_api_key: str
    elevenlabs_api_key: str
    elevenlabs_voice_id: str
    assistant_id: Optional[str] = None
    speech_model_id: str = DEFAULT_SPEECH_MODEL
    music_endpoint: str = DEFAULT_MUSIC_ENDPOINT
    output_root: str = "output"
    poll_interval: float = 1.0
    max_polls: Optional[int] = None
    speech_timeout: float = 120.0
    music_timeout: float = 600.0


def _find_config_path(explicit: str | None) -> Optional[Path]:
    """Return the explicit path or the first existing default, if any."""
    if explicit:
        return Path(explicit)
    for candidate in DEFAULT_PATHS:
        if candidate.exists():
            return candidate
    return None


def _require(key: str, fallback: Any = None) -> str:
    value = os.environ.get(key) or fallback
    if not value:
        raise ConfigMissing(key)
    return value


def load_config(config_path: str | None = None) -> Settings:
    """
    Load settings from an optional JSON file, then apply environment overrides.

    The three API secrets must end up set, either in the environment (a local
    `.env` is honoured) or in the file, otherwise ConfigMissing is raised.
    """
    load_dotenv()
    cfg: Dict[str, Any] = {}
    cfg_path = _find_config_path(config_path)
    if cfg_path is not None:
        with cfg_path.open("r", encoding="utf-8") as f:
            cfg = json.load(f)

    openai_cfg = cfg.get("openai", {})
    eleven = cfg.get("elevenlabs", {})
    music = cfg.get("music", {})
    assets = cfg.get("assets", {})

    max_polls = os.environ.get("ASSISTANT_MAX_POLLS", openai_cfg.get("max_polls"))

    return Settings(
        openai_api_key=_require("OPENAI_API_KEY", openai_cfg.get("api_key")),
        elevenlabs_voice_id=_require("ELEVENLABS_VOICE_ID", eleven.get("voice_id")),
        elevenlabs_api_key=_require("ELEVENLABS_API_KEY", eleven.get("api_key")),
        assistant_id=os.environ.get("ASSISTANT_ID", openai_cfg.get("assistant_id")) or None,
        speech_model_id=eleven.get("model_id", DEFAULT_SPEECH_MODEL),
        music_endpoint=os.environ.get("MUSIC_API_URL", music.get("endpoint", DEFAULT_MUSIC_ENDPOINT)),
        output_root=assets.get("output_root", "output"),
        poll_interval=float(openai_cfg.get("poll_interval", 1.0)),
        max_polls=int(max_polls) if max_polls else None,
        speech_timeout=float(eleven.get("timeout", 120.0)),
        music_timeout=float(music.get("timeout", 600.0)),
    )
