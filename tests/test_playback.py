"""Tests for the narration timeline."""

import pytest

from shorts.playback import active_scene_index, active_subtitle, scene_windows

from conftest import make_script


@pytest.mark.parametrize(
    "elapsed,expected",
    [(0.0, 0), (1.99, 0), (2.0, 1), (5.9, 2), (7.99, 3), (8.0, 3), (42.0, 3)],
)
def test_active_scene_uses_equal_slices(elapsed, expected):
    assert active_scene_index(elapsed, 8.0, 4) == expected


def test_active_scene_without_scenes_is_zero():
    assert active_scene_index(3.0, 8.0, 0) == 0


def test_unknown_duration_counts_as_one_second():
    assert active_scene_index(0.6, 0.0, 2) == 1
    assert active_scene_index(0.4, 0.0, 2) == 0


def test_negative_elapsed_clamps_to_first_scene():
    assert active_scene_index(-1.0, 8.0, 4) == 0


def test_active_subtitle():
    script = make_script(4)

    assert active_subtitle(script, 5.9, 8.0) == "Line 3"
    assert active_subtitle(None, 5.9, 8.0) == ""


def test_scene_windows_cover_duration():
    windows = scene_windows(10.0, 3)

    assert len(windows) == 3
    assert windows[0][0] == 0.0
    assert windows[-1][1] == 10.0
    assert windows[1][0] == pytest.approx(10.0 / 3)
    assert scene_windows(10.0, 0) == []
