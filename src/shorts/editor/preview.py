"""Slideshow preview of a production.

Each scene occupies an equal slice of the narration, shows its clip (looped
or trimmed to the slice) or else its image, and carries its narration line as
a subtitle.
"""

import base64
import logging
import tempfile
from pathlib import Path
from typing import List, Optional

from moviepy import AudioFileClip, ColorClip, ImageClip, VideoClip, VideoFileClip
from moviepy.video.fx import Loop

from ..models import Project
from ..playback import scene_windows
from .compositor import export, fit_to_frame, frame_size, stitch_clips
from .overlays import add_text_overlay

logger = logging.getLogger(__name__)


def load_audio(audio_path: Path) -> AudioFileClip:
    """Load an audio file.

    Raises:
        FileNotFoundError: If audio file doesn't exist.
    """
    if not audio_path.exists():
        raise FileNotFoundError(f"Audio file not found: {audio_path}")

    return AudioFileClip(str(audio_path))


def _scene_clip(
    project: Project,
    index: int,
    length: float,
    workdir: Path,
    opened: List[VideoClip],
) -> Optional[VideoClip]:
    """Visual for one scene; file-backed clips are added to ``opened``."""
    video = project.videos[index]
    if video:
        path = workdir / f"scene_{index + 1}.mp4"
        path.write_bytes(video)
        clip = VideoFileClip(str(path), audio=False)
        opened.append(clip)
        if clip.duration < length:
            return clip.with_effects([Loop(duration=length)])
        return clip.subclipped(0, length)

    image = project.images[index]
    if image:
        path = workdir / f"scene_{index + 1}.png"
        path.write_bytes(base64.b64decode(image))
        return ImageClip(str(path), duration=length)

    return None


def render_preview(
    project: Project,
    output_path: Path,
    fps: int = 24,
    transition: float = 0.0,
    subtitles: bool = True,
) -> Path:
    """Render the project into an MP4 preview.

    Scenes without an image or clip are shown as black frames.

    Args:
        project: Project with a script and narration.
        output_path: Where to write the MP4.
        fps: Frames per second.
        transition: Crossfade duration between scenes in seconds.
        subtitles: Whether to overlay each scene's narration line.

    Returns:
        Path to the rendered preview.

    Raises:
        ValueError: If the project has no script or no narration.
    """
    script = project.script
    if script is None or not script.scenes:
        raise ValueError("Project has no script to preview")
    if not project.audio:
        raise ValueError("Project has no narration to preview")

    size = frame_size(project.aspect_ratio.value)

    with tempfile.TemporaryDirectory(prefix="shorts-preview-") as tmp:
        workdir = Path(tmp)
        narration_path = workdir / "narration.wav"
        narration_path.write_bytes(project.audio)
        audio = load_audio(narration_path)
        opened: List[VideoClip] = []
        video: Optional[VideoClip] = None

        try:
            clips = []
            for i, (start, end) in enumerate(scene_windows(audio.duration, len(script.scenes))):
                length = end - start
                clip = _scene_clip(project, i, length, workdir, opened)
                if clip is None:
                    logger.warning(f"Scene {i + 1} has no visual; using a blank frame")
                    clip = ColorClip(size=size, color=(0, 0, 0), duration=length)
                clip = fit_to_frame(clip, size)
                if subtitles:
                    clip = add_text_overlay(clip, script.scenes[i].text)
                clips.append(clip)

            video = stitch_clips(clips, transition_duration=transition).with_audio(audio)
            logger.info(f"Rendering preview of {len(clips)} scenes ({audio.duration:.1f}s)")
            export(video, output_path, fps=fps)
        finally:
            if video is not None:
                video.close()
            for clip in opened:
                clip.close()
            audio.close()

    return output_path
