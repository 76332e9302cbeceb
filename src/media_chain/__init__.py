"""
Media Chain
-----------
Small clients that chain hosted AI services: an OpenAI assistant runner,
ElevenLabs speech synthesis and Suno music generation.
"""

__all__ = ["config", "errors", "pricing", "tools", "assistant", "speech", "music", "paths", "utils", "cli"]

__version__ = "0.1.0"
