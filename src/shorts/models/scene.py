"""Scene and script data models."""

import json
import re
from typing import List

from pydantic import BaseModel, Field, field_validator

DEFAULT_BGM_PROMPT = "Cinematic, ambient, upbeat background music matching the theme."


class Scene(BaseModel):
    """One narration line paired with its visual prompt."""

    text: str = Field(..., description="Narration line spoken for this scene")
    image_prompt: str = Field(
        ..., alias="imagePrompt", description="Visual prompt used to render the scene"
    )

    class Config:
        """Pydantic config."""
        frozen = False
        populate_by_name = True


class Script(BaseModel):
    """A drafted short: title, ordered scenes and background music prompts."""

    title: str = Field(..., description="Video title")
    scenes: List[Scene] = Field(default_factory=list, description="Scenes in playback order")
    bgm_prompts: List[str] = Field(
        default_factory=lambda: [DEFAULT_BGM_PROMPT],
        alias="bgmPrompts",
        description="Background music descriptions, never empty",
    )

    class Config:
        """Pydantic config."""
        frozen = False
        populate_by_name = True

    @field_validator("bgm_prompts", mode="before")
    @classmethod
    def _default_bgm(cls, value):
        if not value:
            return [DEFAULT_BGM_PROMPT]
        return value

    @property
    def narration(self) -> str:
        """All scene lines joined into one narration text."""
        return ". ".join(scene.text for scene in self.scenes)

    @property
    def slug(self) -> str:
        """Title with whitespace replaced, used for archive and file names."""
        return re.sub(r"\s", "_", self.title)

    def to_json(self) -> str:
        """Serialize with the camelCase keys used in packaged script files."""
        return json.dumps(self.model_dump(by_alias=True), indent=2, ensure_ascii=False)
