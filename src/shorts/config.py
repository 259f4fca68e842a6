"""Configuration management."""

import os
from pathlib import Path
from pydantic import BaseModel, Field
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value else default


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


class Config(BaseModel):
    """Application configuration."""

    # API Keys
    gemini_api_key: str = Field(
        default_factory=lambda: os.getenv("GEMINI_API_KEY", "") or os.getenv("GOOGLE_API_KEY", ""),
        description="Gemini API key (script, speech, image and video generation)"
    )
    anthropic_api_key: str = Field(
        default_factory=lambda: os.getenv("ANTHROPIC_API_KEY", ""),
        description="Anthropic API key (alternative script writer)"
    )

    # Providers
    script_provider: str = Field(
        default_factory=lambda: os.getenv("SHORTS_SCRIPT_PROVIDER", "gemini"),
        description="Script writer backend: 'gemini' or 'anthropic'"
    )

    # Paths
    workspace: Path = Field(
        default_factory=lambda: Path(os.getenv("SHORTS_WORKSPACE", ".")),
        description="Workspace directory"
    )

    # Model settings
    script_model: str = Field(
        default_factory=lambda: os.getenv("SHORTS_SCRIPT_MODEL", "gemini-3-flash-preview"),
        description="Gemini model used to draft scripts"
    )
    anthropic_model: str = Field(
        default_factory=lambda: os.getenv("SHORTS_ANTHROPIC_MODEL", "claude-sonnet-4-20250514"),
        description="Claude model used when script_provider is 'anthropic'"
    )
    tts_model: str = Field(
        default_factory=lambda: os.getenv("SHORTS_TTS_MODEL", "gemini-2.5-flash-preview-tts"),
        description="Speech synthesis model"
    )
    image_model: str = Field(
        default_factory=lambda: os.getenv("SHORTS_IMAGE_MODEL", "gemini-2.5-flash-image"),
        description="Image generation model"
    )
    video_model: str = Field(
        default_factory=lambda: os.getenv("SHORTS_VIDEO_MODEL", "veo-3.1-fast-generate-preview"),
        description="Image-to-video model"
    )

    # Narration
    voice: str = Field(
        default_factory=lambda: os.getenv("SHORTS_VOICE", "Kore"),
        description="Prebuilt voice name for narration"
    )
    narration_language: str = Field(
        default_factory=lambda: os.getenv("SHORTS_NARRATION_LANGUAGE", "Korean"),
        description="Language of the narration lines"
    )
    target_seconds: int = Field(
        default=30,
        description="Target spoken duration of a script",
        gt=0
    )

    # Video jobs
    video_resolution: str = Field(default="720p", description="Generated clip resolution")
    video_poll_interval: float = Field(
        default_factory=lambda: _env_float("SHORTS_VIDEO_POLL_INTERVAL", 5.0),
        description="Seconds between video job status checks",
        gt=0
    )
    video_max_polls: int = Field(
        default_factory=lambda: _env_int("SHORTS_VIDEO_MAX_POLLS", 120),
        description="Maximum status checks before a video job is abandoned",
        gt=0
    )

    class Config:
        """Pydantic config."""
        frozen = False

    def validate_required(self) -> None:
        """Validate that required credentials are set."""
        if not self.gemini_api_key:
            raise ValueError("GEMINI_API_KEY not set")
        if self.script_provider not in ("gemini", "anthropic"):
            raise ValueError(
                f"SHORTS_SCRIPT_PROVIDER must be 'gemini' or 'anthropic'. "
                f"Got: {self.script_provider}"
            )
        if self.script_provider == "anthropic":
            self.validate_anthropic_required()

    def validate_anthropic_required(self) -> None:
        """Validate that Anthropic credentials are set.

        Raises:
            ValueError: If ANTHROPIC_API_KEY is missing.
        """
        if not self.anthropic_api_key:
            raise ValueError(
                "ANTHROPIC_API_KEY not set. "
                "Set it or switch SHORTS_SCRIPT_PROVIDER back to 'gemini'."
            )


# Global config instance
config = Config()
