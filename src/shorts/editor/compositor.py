"""Video compositor for stitching scene clips and adding transitions."""

from pathlib import Path
from typing import List, Optional, Tuple

from moviepy import CompositeVideoClip, VideoClip, concatenate_videoclips
from moviepy.video.fx import CrossFadeIn, CrossFadeOut


def frame_size(aspect_ratio: str, short_side: int = 720) -> Tuple[int, int]:
    """Frame dimensions for an aspect ratio such as ``"9:16"``.

    The shorter side is ``short_side``; both sides are rounded to even
    numbers for the H.264 encoder.
    """
    parts = aspect_ratio.split(":")
    ratio_w = int(parts[0])
    ratio_h = int(parts[1])

    if ratio_w <= ratio_h:
        width = short_side
        height = short_side * ratio_h / ratio_w
    else:
        height = short_side
        width = short_side * ratio_w / ratio_h

    return int(round(width / 2)) * 2, int(round(height / 2)) * 2


def stitch_clips(
    clips: List[VideoClip],
    transition_duration: float = 0.0
) -> VideoClip:
    """Concatenate clips into a single video.

    Args:
        clips: Clips in playback order.
        transition_duration: Duration of crossfade transitions in seconds.
            If 0, clips are concatenated without transitions.

    Returns:
        Concatenated video clip.

    Raises:
        ValueError: If clips is empty.
    """
    if not clips:
        raise ValueError("No clips provided")

    if transition_duration > 0 and len(clips) > 1:
        clips = add_transitions(clips, transition_duration)

    if len(clips) == 1:
        return clips[0]

    return concatenate_videoclips(clips, method="compose")


def add_transitions(
    clips: List[VideoClip],
    duration: float = 0.5
) -> List[VideoClip]:
    """Add crossfade transitions between clips.

    Args:
        clips: List of video clips.
        duration: Duration of each crossfade in seconds.

    Returns:
        List of clips with fade effects applied.
    """
    if len(clips) < 2:
        return clips

    result: List[VideoClip] = []

    for i, clip in enumerate(clips):
        # Apply fade out to all clips except the last
        if i < len(clips) - 1:
            clip = clip.with_effects([CrossFadeOut(duration)])

        # Apply fade in to all clips except the first
        if i > 0:
            clip = clip.with_effects([CrossFadeIn(duration)])

        result.append(clip)

    return result


def fit_to_frame(clip: VideoClip, size: Tuple[int, int]) -> VideoClip:
    """Center-crop a clip to the frame's aspect ratio, then resize to it."""
    target_w, target_h = size
    target_ratio = target_w / target_h
    current_ratio = clip.w / clip.h

    if abs(current_ratio - target_ratio) >= 0.01:
        if current_ratio > target_ratio:
            # Too wide - crop horizontally
            new_w = int(clip.h * target_ratio)
            x1 = clip.w // 2 - new_w // 2
            clip = clip.cropped(x1=x1, x2=x1 + new_w)
        else:
            # Too tall - crop vertically
            new_h = int(clip.w / target_ratio)
            y1 = clip.h // 2 - new_h // 2
            clip = clip.cropped(y1=y1, y2=y1 + new_h)

    if (clip.w, clip.h) != (target_w, target_h):
        clip = clip.resized(new_size=(target_w, target_h))
    return clip


def export(
    video: CompositeVideoClip,
    output_path: Path,
    fps: int = 24,
    codec: str = "libx264",
    audio_codec: str = "aac",
    bitrate: Optional[str] = None,
    preset: str = "medium"
) -> Path:
    """Export video to file with proper encoding.

    Args:
        video: Video clip to export.
        output_path: Path for output file.
        fps: Frames per second.
        codec: Video codec (default libx264).
        audio_codec: Audio codec (default aac).
        bitrate: Video bitrate (e.g., "5000k"). None for auto.
        preset: Encoding preset (ultrafast, fast, medium, slow, slower).

    Returns:
        Path to the exported video file.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)

    export_params = {
        "fps": fps,
        "codec": codec,
        "audio_codec": audio_codec,
        "preset": preset,
    }

    if bitrate:
        export_params["bitrate"] = bitrate

    video.write_videofile(str(output_path), **export_params)

    return output_path
