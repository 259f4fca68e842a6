"""Data models for the shorts producer."""

from .scene import Scene, Script, DEFAULT_BGM_PROMPT
from .project import (
    AspectRatio,
    GenerationStatus,
    Project,
    STYLES,
    resolve_style,
)

__all__ = [
    "Scene",
    "Script",
    "DEFAULT_BGM_PROMPT",
    "AspectRatio",
    "GenerationStatus",
    "Project",
    "STYLES",
    "resolve_style",
]
