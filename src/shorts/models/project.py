"""Project state model."""

import base64
import logging
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, Field

from .scene import Script

logger = logging.getLogger(__name__)

PROJECT_FILE = "project.yaml"
NARRATION_FILE = "narration.wav"
PACKAGE_FILE = "package.zip"

STYLES = [
    "Photorealistic", "3D Animation", "Impressionism", "Cubism", "Realism", "Surrealism",
    "Paper Art", "Minimalism", "Pixel Art", "Cartoon", "Art Deco", "Pop Art",
    "Sci-Fi Fantasy", "Flat Design", "Isometric", "Watercolor", "Sketch",
    "Van Gogh Style", "Monet Style",
]


class GenerationStatus(str, Enum):
    """Production status enum."""
    IDLE = "IDLE"
    SCRIPT_GENERATING = "SCRIPT_GENERATING"
    SCRIPT_REVIEW = "SCRIPT_REVIEW"
    IMAGES_GENERATING = "IMAGES_GENERATING"
    AUDIO_GENERATING = "AUDIO_GENERATING"
    VIDEO_GENERATING = "VIDEO_GENERATING"
    ZIPPING = "ZIPPING"
    COMPLETED = "COMPLETED"
    ERROR = "ERROR"

    @property
    def label(self) -> str:
        """Human readable status line."""
        return _STATUS_LABELS.get(self, "SYSTEM READY")


_STATUS_LABELS = {
    GenerationStatus.SCRIPT_GENERATING: "DRAFTING SCRIPT...",
    GenerationStatus.SCRIPT_REVIEW: "SCRIPT REVIEW",
    GenerationStatus.IMAGES_GENERATING: "RENDERING VISUALS...",
    GenerationStatus.AUDIO_GENERATING: "SYNTHESIZING VOICE...",
    GenerationStatus.VIDEO_GENERATING: "GENERATING MOTION...",
    GenerationStatus.ZIPPING: "PACKAGING ASSETS...",
    GenerationStatus.COMPLETED: "PRODUCTION READY",
    GenerationStatus.ERROR: "SYSTEM HALTED",
}

IN_FLIGHT_STATES = frozenset({
    GenerationStatus.SCRIPT_GENERATING,
    GenerationStatus.IMAGES_GENERATING,
    GenerationStatus.AUDIO_GENERATING,
    GenerationStatus.VIDEO_GENERATING,
    GenerationStatus.ZIPPING,
})


class AspectRatio(str, Enum):
    """Supported output aspect ratios."""
    PORTRAIT = "9:16"
    LANDSCAPE = "16:9"
    SQUARE = "1:1"
    CLASSIC = "4:3"
    CLASSIC_PORTRAIT = "3:4"


def resolve_style(preset: str, custom: Optional[str] = None) -> str:
    """Return the custom style when given, else the preset."""
    if custom and custom.strip():
        return custom.strip()
    return preset


class Project(BaseModel):
    """Complete mutable record of one production."""

    topic: str = Field(default="", description="Subject of the short")
    style: str = Field(default="Photorealistic", description="Resolved visual style")
    aspect_ratio: AspectRatio = Field(default=AspectRatio.PORTRAIT, description="Output aspect ratio")
    scene_count: int = Field(default=5, description="Requested number of scenes", gt=0)
    script: Optional[Script] = Field(None, description="Drafted script")
    images: List[Optional[str]] = Field(default_factory=list, description="Base64 image per scene")
    videos: List[Optional[bytes]] = Field(default_factory=list, description="Clip bytes per scene")
    audio: Optional[bytes] = Field(None, description="Narration WAV container")
    package: Optional[bytes] = Field(None, description="Packaged ZIP archive")
    status: GenerationStatus = Field(default=GenerationStatus.IDLE, description="Current status")
    error: Optional[str] = Field(None, description="Last project-level error message")
    scene_errors: Dict[int, str] = Field(default_factory=dict, description="Scene-scoped errors")

    class Config:
        """Pydantic config."""
        frozen = False

    @property
    def scene_total(self) -> int:
        return len(self.script.scenes) if self.script else 0

    def reset(self) -> None:
        """Drop the script and every asset derived from it."""
        self.script = None
        self.images = []
        self.videos = []
        self.audio = None
        self.package = None
        self.error = None
        self.scene_errors = {}

    def set_script(self, script: Script) -> None:
        """Install a new script with one empty image and video slot per scene."""
        self.script = script
        self.images = [None] * len(script.scenes)
        self.videos = [None] * len(script.scenes)
        self.package = None

    def set_image(self, index: int, image: str) -> None:
        self.images[index] = image
        self.package = None

    def set_video(self, index: int, video: bytes) -> None:
        self.videos[index] = video
        self.package = None

    def set_audio(self, audio: bytes) -> None:
        self.audio = audio
        self.package = None

    def save(self, directory: Path) -> Path:
        """Save the project into a workspace directory.

        Scalar state and the script go to ``project.yaml``; assets are
        written next to it as ``images/scene_<n>.png``, ``videos/scene_<n>.mp4``,
        ``narration.wav`` and ``package.zip``.

        Args:
            directory: Workspace directory, created if missing.

        Returns:
            Path to the written ``project.yaml``.
        """
        directory.mkdir(parents=True, exist_ok=True)
        images_dir = directory / "images"
        videos_dir = directory / "videos"

        for folder, slots, suffix in (
            (images_dir, self.images, ".png"),
            (videos_dir, self.videos, ".mp4"),
        ):
            folder.mkdir(exist_ok=True)
            for stale in folder.glob(f"scene_*{suffix}"):
                stale.unlink()
            for i, slot in enumerate(slots):
                if not slot:
                    continue
                data = base64.b64decode(slot) if isinstance(slot, str) else slot
                (folder / f"scene_{i + 1}{suffix}").write_bytes(data)

        for name, blob in ((NARRATION_FILE, self.audio), (PACKAGE_FILE, self.package)):
            path = directory / name
            if blob:
                path.write_bytes(blob)
            elif path.exists():
                path.unlink()

        state = self.model_dump(
            mode="json",
            by_alias=True,
            exclude={"images", "videos", "audio", "package"},
        )
        project_path = directory / PROJECT_FILE
        with open(project_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(state, f, default_flow_style=False, allow_unicode=True, sort_keys=False)

        logger.debug(f"Saved project to {project_path}")
        return project_path

    @classmethod
    def load(cls, directory: Path) -> "Project":
        """Load a project previously written by :meth:`save`.

        Raises:
            FileNotFoundError: If the workspace has no ``project.yaml``.
        """
        project_path = directory / PROJECT_FILE
        if not project_path.exists():
            raise FileNotFoundError(f"No project found at {project_path}")

        with open(project_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        project = cls(**data)
        if project.status in IN_FLIGHT_STATES:
            # A previous run died mid-operation
            logger.warning(f"Project was left in {project.status.value}; marking as interrupted")
            project.status = GenerationStatus.ERROR
            project.error = "Previous operation was interrupted."

        count = project.scene_total
        project.images = [None] * count
        project.videos = [None] * count

        for i in range(count):
            image_path = directory / "images" / f"scene_{i + 1}.png"
            if image_path.exists():
                project.images[i] = base64.b64encode(image_path.read_bytes()).decode("ascii")
            video_path = directory / "videos" / f"scene_{i + 1}.mp4"
            if video_path.exists():
                project.videos[i] = video_path.read_bytes()

        narration_path = directory / NARRATION_FILE
        if narration_path.exists():
            project.audio = narration_path.read_bytes()
        package_path = directory / PACKAGE_FILE
        if package_path.exists():
            project.package = package_path.read_bytes()

        logger.debug(f"Loaded project from {project_path} ({count} scenes)")
        return project
