"""External service integrations."""

from .anthropic import AnthropicClient
from .base import JobStatus, MediaGenerator, ScriptGenerator, ScriptRequest, VideoJobState
from .gemini import GeminiClient
from .video import VideoJobPoller

__all__ = [
    "AnthropicClient",
    "GeminiClient",
    "JobStatus",
    "MediaGenerator",
    "ScriptGenerator",
    "ScriptRequest",
    "VideoJobState",
    "VideoJobPoller",
]
