"""Exception hierarchy shared by the media clients."""
from __future__ import annotations

from typing import Optional


class MediaChainError(Exception):
    pass


class ConfigMissing(MediaChainError):
    def __init__(self, key: str):
        super().__init__(f"{key} is not set")
        self.key = key


class InvalidModel(MediaChainError, ValueError):
    pass


class InvalidInput(MediaChainError, ValueError):
    pass


class MissingModel(MediaChainError, ValueError):
    pass


class MissingAssistant(MediaChainError, ValueError):
    pass


class MissingPromptOrModel(MediaChainError, ValueError):
    pass


class UpstreamError(MediaChainError):
    """A backend answered with a non-retryable failure."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ServerBusyTimeout(MediaChainError):
    pass


class EncodingFailed(MediaChainError):
    def __init__(self, returncode: int, stderr: str = ""):
        super().__init__(f"FFmpeg process exited with code {returncode}")
        self.returncode = returncode
        self.stderr = stderr


class EncoderUnavailable(MediaChainError):
    pass


class RunTimeout(MediaChainError):
    pass
