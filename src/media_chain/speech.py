"""ElevenLabs text-to-speech with rate-limit backoff and an ffmpeg re-encode."""
from __future__ import annotations

import logging
import subprocess
import time
from pathlib import Path
from typing import Callable, List, Optional

import ffmpeg
import requests

from .config import Settings
from .errors import EncoderUnavailable, EncodingFailed, InvalidInput, ServerBusyTimeout, UpstreamError
from .utils import fixed_path, speech_filename

TTS_URL = "https://api.elevenlabs.io/v1/text-to-speech/{voice_id}"
INITIAL_BACKOFF_MS = 2000
MAX_BACKOFF_MS = 600_000
BITRATE = "128k"


def encoder_command(src: Path, dest: Path, ffmpeg_bin: str = "ffmpeg") -> List[str]:
    return (
        ffmpeg.input(str(src))
        .output(str(dest), acodec="libmp3lame", audio_bitrate=BITRATE)
        .overwrite_output()
        .compile(cmd=ffmpeg_bin)
    )


def reencode_mp3(src: Path, ffmpeg_bin: str = "ffmpeg") -> Path:
    """Re-encode `src` to a constant-bitrate MP3 next to it and return the new path."""
    dest = fixed_path(src)
    cmd = encoder_command(src, dest, ffmpeg_bin)
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True)
    except OSError as e:
        raise EncoderUnavailable(f"Could not launch {ffmpeg_bin}: {e}") from e
    if proc.returncode != 0:
        raise EncodingFailed(proc.returncode, proc.stderr.strip())
    return dest


class SpeechClient:
    def __init__(
        self,
        api_key: str,
        voice_id: str,
        model_id: str = "eleven_english_v2",
        output_dir: Path = Path("."),
        session: Optional[requests.Session] = None,
        timeout: float = 120.0,
        sleep: Callable[[float], None] = time.sleep,
        ffmpeg_bin: str = "ffmpeg",
    ):
        self.api_key = api_key
        self.voice_id = voice_id
        self.model_id = model_id
        self.output_dir = Path(output_dir)
        self.session = session or requests.Session()
        self.timeout = timeout
        self.sleep = sleep
        self.ffmpeg_bin = ffmpeg_bin

    @classmethod
    def from_settings(cls, settings: Settings, output_dir: Path, **kwargs) -> "SpeechClient":
        return cls(
            api_key=settings.elevenlabs_api_key,
            voice_id=settings.elevenlabs_voice_id,
            model_id=settings.speech_model_id,
            output_dir=output_dir,
            timeout=settings.speech_timeout,
            **kwargs,
        )

    def _post(self, text: str, voice_id: str, voice_settings: dict) -> requests.Response:
        return self.session.post(
            TTS_URL.format(voice_id=voice_id),
            headers={
                "Accept": "audio/mpeg",
                "Content-Type": "application/json",
                "xi-api-key": self.api_key,
            },
            json={"model_id": self.model_id, "text": text, "voice_settings": voice_settings},
            timeout=self.timeout,
        )

    def synthesize(
        self,
        text: str,
        similarity_boost: float = 0.5,
        stability: float = 0.5,
        style: float = 0.4,
        use_speaker_boost: bool = True,
        voice_id: Optional[str] = None,
    ) -> bytes:
        """
        Request audio for `text`, sleeping 2s, 4s, 8s ... between rate-limited attempts.

        Gives up with ServerBusyTimeout once the next wait would exceed ten minutes.
        Any other non-2xx response raises UpstreamError straight away.
        """
        if not text:
            raise InvalidInput("text is required")
        voice_settings = {
            "similarity_boost": similarity_boost,
            "stability": stability,
            "use_speaker_boost": use_speaker_boost,
            "style": style,
        }
        wait_ms = INITIAL_BACKOFF_MS
        while True:
            resp = self._post(text, voice_id or self.voice_id, voice_settings)
            if resp.status_code == 429:
                if wait_ms > MAX_BACKOFF_MS:
                    raise ServerBusyTimeout("server busy for too long, aborted after 10 minutes")
                logging.info("ElevenLabs busy, waiting %s seconds...", wait_ms / 1000)
                self.sleep(wait_ms / 1000)
                wait_ms *= 2
                continue
            if not resp.ok:
                raise UpstreamError(f"HTTP error! status: {resp.text}", resp.status_code, resp.text)
            return resp.content

    def text_to_speech(self, text: str, **voice_options) -> Path:
        """Synthesize `text`, save it under a name derived from the text and return the re-encoded copy."""
        logging.info("ElevenLabs processing started")
        audio = self.synthesize(text, **voice_options)

        self.output_dir.mkdir(parents=True, exist_ok=True)
        audio_path = self.output_dir / speech_filename(text)
        audio_path.write_bytes(audio)

        encoded_path = reencode_mp3(audio_path, self.ffmpeg_bin)
        logging.info("%s created", encoded_path)
        return encoded_path
