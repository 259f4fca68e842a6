"""Collaborator contracts consumed by the studio."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Protocol

from ..models import Script


@dataclass
class ScriptRequest:
    """Input for drafting a script."""

    topic: str
    scene_count: int = 5
    style: str = "Photorealistic"
    target_seconds: int = 30
    language: str = "Korean"


class JobStatus(str, Enum):
    """Status of a long-running video job."""

    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class VideoJobState:
    """Snapshot of a video job returned by each status check."""

    job: Any
    done: bool = False
    uri: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def status(self) -> JobStatus:
        if not self.done:
            return JobStatus.PROCESSING
        if self.error_message or not self.uri:
            return JobStatus.FAILED
        return JobStatus.COMPLETED


class ScriptGenerator(Protocol):
    """Drafts a script from a topic."""

    async def write_script(self, request: ScriptRequest) -> Script:
        ...


class MediaGenerator(Protocol):
    """Speech, image and video generation endpoints."""

    async def synthesize_speech(self, text: str, voice: str) -> bytes:
        """Return raw 16-bit mono 24kHz PCM for ``text``."""
        ...

    async def generate_image(self, prompt: str, aspect_ratio: str) -> str:
        """Return a base64-encoded PNG."""
        ...

    async def submit_video(
        self,
        prompt: str,
        image_b64: str,
        mime_type: str,
        aspect_ratio: str,
        resolution: str,
    ) -> VideoJobState:
        ...

    async def refresh_video(self, state: VideoJobState) -> VideoJobState:
        ...

    async def download_video(self, uri: str) -> bytes:
        ...
