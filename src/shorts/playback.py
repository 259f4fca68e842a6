"""Narration playback timeline.

Scenes share the narration equally: with ``n`` scenes and a total duration
``d`` every scene owns a ``d / n`` slice, regardless of how long its line
actually is.
"""

import math
from typing import List, Optional, Tuple

from .models import Script


def active_scene_index(elapsed: float, duration: float, scene_count: int) -> int:
    """Index of the scene playing at ``elapsed`` seconds.

    Args:
        elapsed: Current playback position in seconds.
        duration: Total narration duration in seconds. Non-positive
            durations are treated as 1 second.
        scene_count: Number of scenes.

    Returns:
        Zero-based scene index, clamped to the last scene; 0 when there
        are no scenes.
    """
    if scene_count <= 0:
        return 0
    if duration <= 0:
        duration = 1.0
    slice_length = duration / scene_count
    index = math.floor(max(elapsed, 0.0) / slice_length)
    return min(index, scene_count - 1)


def active_subtitle(script: Optional[Script], elapsed: float, duration: float) -> str:
    """Narration line shown at ``elapsed`` seconds."""
    if script is None or not script.scenes:
        return ""
    index = active_scene_index(elapsed, duration, len(script.scenes))
    return script.scenes[index].text


def scene_windows(duration: float, scene_count: int) -> List[Tuple[float, float]]:
    """Start and end time of every scene slice."""
    if scene_count <= 0:
        return []
    slice_length = duration / scene_count
    windows = [(i * slice_length, (i + 1) * slice_length) for i in range(scene_count)]
    # Absorb float drift so the last window ends exactly at the duration
    windows[-1] = (windows[-1][0], duration)
    return windows
