"""AI agents for content generation."""

from .base import BaseAgent, TextClient, default_text_client
from .scriptwriter import ScriptWriterAgent

__all__ = ["BaseAgent", "TextClient", "default_text_client", "ScriptWriterAgent"]
