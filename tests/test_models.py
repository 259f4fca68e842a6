"""Tests for the script and project models."""

import pytest

from shorts.models import (
    DEFAULT_BGM_PROMPT,
    AspectRatio,
    GenerationStatus,
    Project,
    Script,
    resolve_style,
)

from conftest import make_script, png_b64


class TestScript:
    def test_accepts_camel_case_payload(self):
        script = Script.model_validate({
            "title": "Night Market",
            "scenes": [{"text": "Hello", "imagePrompt": "Neon stalls"}],
            "bgmPrompts": ["Synthwave"],
        })

        assert script.scenes[0].image_prompt == "Neon stalls"
        assert script.bgm_prompts == ["Synthwave"]

    @pytest.mark.parametrize("payload", [{}, {"bgmPrompts": []}, {"bgmPrompts": None}])
    def test_missing_bgm_gets_default(self, payload):
        script = Script.model_validate({"title": "T", "scenes": [], **payload})

        assert script.bgm_prompts == [DEFAULT_BGM_PROMPT]

    def test_narration_joins_lines(self):
        assert make_script(3).narration == "Line 1. Line 2. Line 3"

    def test_slug_replaces_whitespace(self):
        script = make_script()
        script.title = "Tokyo  at\tnight"

        assert script.slug == "Tokyo__at_night"

    def test_to_json_keeps_camel_case_and_unicode(self):
        script = make_script(1)
        script.scenes[0].text = "겨울 간식"

        payload = script.to_json()

        assert '"imagePrompt": "Prompt 1"' in payload
        assert '"bgmPrompts"' in payload
        assert "겨울 간식" in payload


def test_resolve_style_prefers_custom():
    assert resolve_style("Cartoon", "ink wash") == "ink wash"
    assert resolve_style("Cartoon", "   ") == "Cartoon"
    assert resolve_style("Cartoon") == "Cartoon"


def test_status_labels():
    assert GenerationStatus.IDLE.label == "SYSTEM READY"
    assert GenerationStatus.ERROR.label == "SYSTEM HALTED"
    assert GenerationStatus.COMPLETED.label == "PRODUCTION READY"


class TestProject:
    def test_set_script_allocates_empty_slots(self):
        project = Project(package=b"zip")

        project.set_script(make_script(4))

        assert project.images == [None] * 4
        assert project.videos == [None] * 4
        assert project.package is None
        assert project.scene_total == 4

    def test_asset_changes_invalidate_package(self):
        project = Project()
        project.set_script(make_script(2))

        for change in (
            lambda: project.set_image(0, png_b64("a")),
            lambda: project.set_video(1, b"mp4"),
            lambda: project.set_audio(b"RIFF"),
        ):
            project.package = b"zip"
            change()
            assert project.package is None

    def test_reset_clears_everything_derived(self):
        project = Project(audio=b"RIFF", package=b"zip", error="boom", scene_errors={0: "x"})
        project.set_script(make_script(2))

        project.reset()

        assert project.script is None
        assert project.images == [] and project.videos == []
        assert project.audio is None and project.package is None
        assert project.error is None and project.scene_errors == {}

    def test_save_and_load_round_trip(self, tmp_path):
        project = Project(topic="street food", style="Watercolor", aspect_ratio=AspectRatio.SQUARE)
        project.set_script(make_script(3))
        project.set_image(0, png_b64("first"))
        project.set_image(2, png_b64("third"))
        project.set_video(2, b"mp4-bytes")
        project.set_audio(b"RIFF-wav")
        project.package = b"PK-zip"
        project.status = GenerationStatus.COMPLETED
        project.scene_errors[1] = "Scene 2 rendering failed."

        project.save(tmp_path)
        loaded = Project.load(tmp_path)

        assert (tmp_path / "project.yaml").exists()
        assert (tmp_path / "images" / "scene_1.png").read_bytes() == b"png-first"
        assert loaded.topic == "street food"
        assert loaded.aspect_ratio == AspectRatio.SQUARE
        assert loaded.script == project.script
        assert loaded.images == [png_b64("first"), None, png_b64("third")]
        assert loaded.videos == [None, None, b"mp4-bytes"]
        assert loaded.audio == b"RIFF-wav"
        assert loaded.package == b"PK-zip"
        assert loaded.status == GenerationStatus.COMPLETED
        assert loaded.scene_errors == {1: "Scene 2 rendering failed."}

    def test_save_removes_stale_assets(self, tmp_path):
        project = Project()
        project.set_script(make_script(2))
        project.set_image(1, png_b64("old"))
        project.package = b"PK"
        project.save(tmp_path)

        project.set_script(make_script(2))
        project.save(tmp_path)

        assert not (tmp_path / "images" / "scene_2.png").exists()
        assert not (tmp_path / "package.zip").exists()
        assert Project.load(tmp_path).images == [None, None]

    def test_load_marks_interrupted_operation(self, tmp_path):
        project = Project()
        project.set_script(make_script(2))
        project.status = GenerationStatus.IMAGES_GENERATING
        project.save(tmp_path)

        loaded = Project.load(tmp_path)

        assert loaded.status == GenerationStatus.ERROR
        assert loaded.error == "Previous operation was interrupted."

    def test_load_missing_workspace(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Project.load(tmp_path / "nowhere")
