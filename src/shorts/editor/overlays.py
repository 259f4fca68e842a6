"""Subtitle overlay rendering for preview clips."""

from dataclasses import dataclass
from typing import Optional

from moviepy import CompositeVideoClip, TextClip, VideoClip


@dataclass
class TextStyle:
    """Configuration for text overlay styling."""

    font: Optional[str] = None  # None uses Pillow's built-in font
    font_size: int = 48
    color: str = "white"
    stroke_color: Optional[str] = "black"
    stroke_width: int = 2
    background_color: Optional[str] = None
    width_ratio: float = 0.85


SUBTITLE = TextStyle(font_size=42, stroke_width=2)


def render_text(
    text: str,
    width: int,
    style: Optional[TextStyle] = None,
    duration: Optional[float] = None,
) -> TextClip:
    """Create a wrapped text clip.

    Args:
        text: Text content to render.
        width: Width of the frame the text is laid over.
        style: TextStyle configuration. Uses the subtitle style if None.
        duration: Duration of the text clip in seconds.

    Returns:
        TextClip with the styled text.
    """
    if style is None:
        style = SUBTITLE

    params = {
        "text": text,
        "font": style.font,
        "font_size": style.font_size,
        "color": style.color,
        "method": "caption",
        "size": (int(width * style.width_ratio), None),
    }

    if style.stroke_color and style.stroke_width > 0:
        params["stroke_color"] = style.stroke_color
        params["stroke_width"] = style.stroke_width

    if style.background_color:
        params["bg_color"] = style.background_color

    text_clip = TextClip(**params)

    if duration is not None:
        text_clip = text_clip.with_duration(duration)

    return text_clip


def add_text_overlay(
    video: VideoClip,
    text: str,
    style: Optional[TextStyle] = None,
    margin: int = 80,
) -> CompositeVideoClip:
    """Lay a subtitle near the bottom of a clip for its whole duration.

    Args:
        video: Video clip to add overlay to.
        text: Text content. Blank text returns the clip wrapped unchanged.
        style: TextStyle configuration. Uses the subtitle style if None.
        margin: Distance in pixels from the bottom edge.

    Returns:
        Composite video clip with text overlay.
    """
    if not text.strip():
        return CompositeVideoClip([video])

    text_clip = render_text(text, video.w, style, video.duration)
    y = max(video.h - text_clip.h - margin, 0)
    text_clip = text_clip.with_position(("center", y))

    return CompositeVideoClip([video, text_clip])
