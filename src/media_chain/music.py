"""Suno text-to-music, optionally with lyrics invented by the assistant."""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional, Tuple

import requests

from .assistant import AgentRunner
from .config import Settings
from .errors import UpstreamError

LYRICS_MODEL = "gpt-4o"

MUSICIAN_INSTRUCTIONS = (
    "You are a creative musician trained on all of music history. Help the user create music with whatever "
    "vibes/lyrics they ask for! Remember, the maximum song length is 3 minutes, so keep the lyrics to a handful "
    "of sentences. Also, try to keep the vibe and mood to under one sentence each. The title should be 5 words "
    "or less. Remember, the lyrics should be really weird and borderline crazy. Don't go simple on the lyrics, "
    "make them memorable because of how wild they are!"
)


class MusicClient:
    def __init__(
        self,
        endpoint: str,
        runner: Optional[AgentRunner] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 600.0,
    ):
        self.endpoint = endpoint.rstrip("/")
        self.runner = runner
        self.session = session or requests.Session()
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings, runner: Optional[AgentRunner] = None) -> "MusicClient":
        return cls(settings.music_endpoint, runner=runner, timeout=settings.music_timeout)

    async def write_song(self, text: str) -> Tuple[str, str, str]:
        """Ask the assistant for lyrics, tags and a title inspired by `text`."""
        if self.runner is None:
            raise RuntimeError("An AgentRunner is required to generate lyrics")
        result = await self.runner.assist(
            model=LYRICS_MODEL,
            response_format={"type": "json_object"},
            instructions=MUSICIAN_INSTRUCTIONS,
            prompt=f'Return a {{ lyrics, vibe, mood, title }} JSON object based on the user\'s input: "{text}"',
        )
        song = json.loads(result.reply)
        return song["lyrics"], ", ".join([song["vibe"], song["mood"]]), song["title"]

    async def build_request(self, text: str, lyrics: Optional[str] = None, instrumental: bool = True) -> Dict[str, Any]:
        if instrumental:
            prompt, tags, title = " ", text, text
        elif not lyrics:
            prompt, tags, title = await self.write_song(text)
        else:
            prompt, tags, title = lyrics, text, text
        return {
            "prompt": prompt,
            "tags": tags,
            "title": title,
            "make_instrumental": instrumental,
            "wait_audio": True,
        }

    async def text_to_music(
        self,
        text: str,
        lyrics: Optional[str] = None,
        instrumental: bool = True,
        write_file: bool = False,
    ) -> str:
        """Generate a track and return the audio URL of the first result."""
        body = await self.build_request(text, lyrics=lyrics, instrumental=instrumental)
        logging.info("Requesting track %r (tags: %s)", body["title"], body["tags"])
        resp = await asyncio.to_thread(
            self.session.post, f"{self.endpoint}/api/custom_generate", json=body, timeout=self.timeout
        )
        if not resp.ok:
            raise UpstreamError(f"Music generation failed: {resp.text}", resp.status_code, resp.text)
        try:
            tracks = resp.json()
            logging.info("Music backend returned %s", tracks)
            audio_url = tracks[0]["audio_url"]
        except IndexError as e:
            raise UpstreamError("Music generation returned no tracks", resp.status_code, resp.text) from e
        except (ValueError, KeyError, TypeError) as e:
            raise UpstreamError(f"Unexpected music response: {resp.text}", resp.status_code, resp.text) from e

        if write_file:
            logging.warning("File writing is not implemented, returning the audio URL only")
        return audio_url
