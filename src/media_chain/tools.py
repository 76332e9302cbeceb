"""Function-tool declarations offered to the assistant and their local handlers."""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

ToolHandler = Callable[[Dict[str, Any]], Awaitable[Any]]

CREATIVE_VIDEO_CREATOR: Dict[str, Any] = {
    "type": "function",
    "function": {
        "name": "creative_video_creator",
        "description": (
            "Use scenes to create a compelling video reel. The text overlay of each scene will make up the "
            "script of the video. Use those text overlays to tell the viewer a story--however short that "
            "story may be. Remember, you want to be creative but concise. Clever but clear. Trailblazing but "
            "relevant. Remember, this function is for YOU (THE AGENT) to use. Do not ask the user for more "
            "information if you can fill in the gaps yourself!"
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "video_data": {
                    "type": "object",
                    "properties": {
                        "scenes": {
                            "type": "array",
                            "items": {
                                "type": "object",
                                "properties": {
                                    "video_clip": {
                                        "type": "string",
                                        "description": "short semantic description of the video clip",
                                    },
                                    "text_overlay": {
                                        "type": "string",
                                        "description": (
                                            "One sentence maximum! One idea per scene. ONE SENTENCE MAXIMUM! "
                                            "Each text overlay helps carry the message of the reel."
                                        ),
                                    },
                                },
                                "required": ["video_clip", "text_overlay"],
                            },
                        },
                        "music_clip": {
                            "type": "string",
                            "description": "short semantic description of the music clip",
                        },
                    },
                    "required": ["scenes", "music_clip"],
                },
                "caption_text": {
                    "type": "string",
                    "description": "caption text that elaborates on the ideas presented in the video",
                },
            },
            "required": ["video_data", "caption_text"],
        },
    },
}

FETCH_USER_DATA: Dict[str, Any] = {
    "type": "function",
    "function": {
        "name": "fetch_user_data",
        "description": "Fetch information about the user.",
        "parameters": {
            "type": "object",
            "properties": {"user_id": {"type": "string"}},
            "required": ["user_id"],
        },
    },
}

DEFAULT_TOOLS = [CREATIVE_VIDEO_CREATOR]

VIDEO_NOT_AVAILABLE = "not available"


async def creative_video_creator(args: Dict[str, Any]) -> str:
    """Reel compositing is not implemented; always reports it as unavailable."""
    await asyncio.sleep(0.01)
    return VIDEO_NOT_AVAILABLE


async def acknowledge(args: Dict[str, Any]) -> Dict[str, bool]:
    return {"success": True}


class ToolRegistry:
    """Maps tool function names to async handlers, with a fallback for unknown names."""

    def __init__(self, default: Optional[ToolHandler] = None):
        self._handlers: Dict[str, ToolHandler] = {}
        self.default = default or acknowledge

    def register(self, name: str, handler: ToolHandler) -> None:
        self._handlers[name] = handler

    def __contains__(self, name: str) -> bool:
        return name in self._handlers

    def get(self, name: str) -> ToolHandler:
        if name not in self:
            logging.warning("Unknown tool: %s", name)
            return self.default
        return self._handlers[name]

    async def dispatch(self, name: str, arguments: str) -> Any:
        """Decode the JSON arguments of a tool call and run its handler."""
        args = json.loads(arguments) if arguments else {}
        return await self.get(name)(args)


def default_registry() -> ToolRegistry:
    registry = ToolRegistry()
    registry.register(CREATIVE_VIDEO_CREATOR["function"]["name"], creative_video_creator)
    return registry
