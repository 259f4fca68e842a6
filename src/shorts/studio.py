"""Production state machine for one short."""

import asyncio
import logging
from collections import Counter
from typing import Dict, Optional, Set

from .config import config
from .editor.audio import wav_duration, wrap_pcm_in_wav
from .errors import (
    PackagingError,
    RemoteGenerationError,
    StudioBusyError,
    ValidationError,
)
from .models import AspectRatio, GenerationStatus, Project, Script, resolve_style
from .models.project import IN_FLIGHT_STATES
from .packaging import build_package
from .playback import active_scene_index, active_subtitle
from .services.base import MediaGenerator, ScriptGenerator, ScriptRequest
from .services.video import VideoJobPoller

logger = logging.getLogger(__name__)

DEFAULT_SCENE_COUNT = 5
VIDEO_SEED_MIME_TYPE = "image/png"


class Studio:
    """Owns one Project and drives it through the production lifecycle.

    Project-wide operations (drafting, bulk asset generation, narration,
    packaging) move ``project.status`` and land in ``ERROR`` on failure.
    Per-scene image and video operations only mark their index busy, may
    overlap each other and a bulk run, and report failures per scene.
    """

    def __init__(
        self,
        writer: ScriptGenerator,
        media: MediaGenerator,
        project: Optional[Project] = None,
        poller: Optional[VideoJobPoller] = None,
        voice: Optional[str] = None,
        narration_language: Optional[str] = None,
        target_seconds: Optional[int] = None,
        video_resolution: Optional[str] = None,
    ) -> None:
        """Initialize the studio.

        Args:
            writer: Script generation collaborator.
            media: Speech, image and video generation collaborator.
            project: Existing project to resume. A fresh IDLE project if omitted.
            poller: Video job poller. Built from configuration if omitted.
            voice: Narration voice. Defaults to config.voice.
            narration_language: Narration language. Defaults to config.narration_language.
            target_seconds: Target spoken duration. Defaults to config.target_seconds.
            video_resolution: Clip resolution. Defaults to config.video_resolution.
        """
        self._writer = writer
        self._media = media
        self.project = project or Project()
        self._poller = poller or VideoJobPoller(
            media,
            poll_interval=config.video_poll_interval,
            max_polls=config.video_max_polls,
        )
        self._voice = voice or config.voice
        self._language = narration_language or config.narration_language
        self._target_seconds = target_seconds or config.target_seconds
        self._video_resolution = video_resolution or config.video_resolution

        self._image_claims: Counter = Counter()
        self.busy_videos: Set[int] = set()
        self._video_cancels: Dict[int, asyncio.Event] = {}

    @classmethod
    def from_config(cls, project: Optional[Project] = None) -> "Studio":
        """Build a studio wired to the configured Gemini (and Anthropic) services."""
        from .agents import ScriptWriterAgent
        from .services.anthropic import AnthropicClient
        from .services.gemini import GeminiClient

        config.validate_required()
        gemini = GeminiClient()
        text_client = AnthropicClient() if config.script_provider == "anthropic" else gemini
        return cls(
            writer=ScriptWriterAgent(client=text_client),
            media=gemini,
            project=project,
        )

    @property
    def busy_images(self) -> Set[int]:
        """Scene indices with an image render in flight."""
        return {i for i, claims in self._image_claims.items() if claims > 0}

    def _claim_image(self, index: int) -> None:
        self._image_claims[index] += 1

    def _release_image(self, index: int) -> None:
        self._image_claims[index] -= 1
        if self._image_claims[index] <= 0:
            del self._image_claims[index]

    @property
    def status(self) -> GenerationStatus:
        return self.project.status

    @property
    def is_processing(self) -> bool:
        """True while any project-wide or per-scene operation is in flight."""
        return (
            self.project.status in IN_FLIGHT_STATES
            or bool(self.busy_images)
            or bool(self.busy_videos)
        )

    def _ensure_idle(self) -> None:
        if self.is_processing:
            raise StudioBusyError(
                f"Another operation is in progress ({self.project.status.value})"
            )

    def _require_script(self) -> Script:
        if self.project.script is None:
            raise ValidationError("No script yet. Draft a script first.")
        return self.project.script

    def _require_index(self, index: int) -> Script:
        script = self._require_script()
        if not 0 <= index < len(script.scenes):
            raise ValidationError(
                f"Scene index {index} out of range (0-{len(script.scenes) - 1})"
            )
        return script

    def _fail(self, message: str) -> None:
        logger.error(message)
        self.project.error = message
        self.project.status = GenerationStatus.ERROR

    def _scene_failed(self, script: Script, index: int, step: str, error: Exception) -> None:
        logger.error(f"Scene {index + 1} {step} failed: {error}")
        if self.project.script is not script:
            return
        self.project.scene_errors[index] = f"Scene {index + 1} {step} failed."

    async def draft_script(
        self,
        topic: str,
        scene_count: Optional[int] = None,
        aspect_ratio: Optional[str] = None,
        style: Optional[str] = None,
        custom_style: Optional[str] = None,
    ) -> bool:
        """Start over with a freshly drafted script.

        All derived assets are dropped before the remote call.

        Args:
            topic: Subject of the short. Must not be blank.
            scene_count: Number of scenes; ``None`` picks the default.
            aspect_ratio: Output aspect ratio.
            style: Preset visual style.
            custom_style: Free-form style overriding the preset.

        Returns:
            True when the script was drafted; False when the service failed
            and the project moved to ERROR.

        Raises:
            ValidationError: If the topic is blank or an operation is in flight.
        """
        if not topic or not topic.strip():
            raise ValidationError("Please enter a topic.")
        if aspect_ratio and aspect_ratio not in {r.value for r in AspectRatio}:
            raise ValidationError(f"Unsupported aspect ratio: {aspect_ratio}")
        if scene_count is not None and scene_count < 1:
            raise ValidationError("Scene count must be at least 1")
        self._ensure_idle()

        project = self.project
        project.reset()
        project.topic = topic.strip()
        project.scene_count = scene_count or DEFAULT_SCENE_COUNT
        if aspect_ratio:
            project.aspect_ratio = AspectRatio(aspect_ratio)
        project.style = resolve_style(style or project.style, custom_style)
        project.status = GenerationStatus.SCRIPT_GENERATING

        request = ScriptRequest(
            topic=project.topic,
            scene_count=project.scene_count,
            style=project.style,
            target_seconds=self._target_seconds,
            language=self._language,
        )
        try:
            script = await self._writer.write_script(request)
        except RemoteGenerationError as e:
            self._fail(str(e) or "Script generation failed.")
            return False
        except Exception as e:
            self._fail(f"Script generation failed: {e}")
            raise

        project.set_script(script)
        project.status = GenerationStatus.SCRIPT_REVIEW
        logger.info(f"Script ready: '{script.title}' ({len(script.scenes)} scenes)")
        return True

    async def _synthesize_narration(self, script: Script) -> None:
        self.project.status = GenerationStatus.AUDIO_GENERATING
        pcm = await self._media.synthesize_speech(script.narration, self._voice)
        self.project.set_audio(wrap_pcm_in_wav(pcm))
        logger.info(f"Narration ready ({wav_duration(self.project.audio):.1f}s)")

    async def generate_audio(self) -> bool:
        """Synthesize one narration track for the whole script.

        Returns to SCRIPT_REVIEW on success.

        Raises:
            ValidationError: If there is no script or an operation is in flight.
        """
        script = self._require_script()
        self._ensure_idle()
        self.project.error = None

        try:
            await self._synthesize_narration(script)
        except RemoteGenerationError as e:
            self._fail(str(e) or "Audio synthesis error.")
            return False
        except Exception as e:
            self._fail(f"Audio synthesis error: {e}")
            raise

        self.project.status = GenerationStatus.SCRIPT_REVIEW
        return True

    async def generate_all_assets(self) -> bool:
        """Render every scene image in order, then the narration.

        Images are generated one at a time in ascending scene order. The
        first failure stops the run; images already rendered are kept and
        narration is not attempted.

        Returns:
            True when the project reached COMPLETED.

        Raises:
            ValidationError: If there is no script or an operation is in flight.
        """
        script = self._require_script()
        self._ensure_idle()
        project = self.project
        project.error = None
        project.status = GenerationStatus.IMAGES_GENERATING

        try:
            for i, scene in enumerate(script.scenes):
                self._claim_image(i)
                try:
                    image = await self._media.generate_image(
                        scene.image_prompt, project.aspect_ratio.value
                    )
                finally:
                    self._release_image(i)
                project.set_image(i, image)
                project.scene_errors.pop(i, None)
                logger.info(f"Scene {i + 1}/{len(script.scenes)} rendered")

            await self._synthesize_narration(script)
        except RemoteGenerationError as e:
            self._fail(str(e) or "Batch asset generation failed.")
            return False
        except Exception as e:
            self._fail(f"Batch asset generation failed: {e}")
            raise

        project.status = GenerationStatus.COMPLETED
        return True

    async def generate_single_image(self, index: int) -> bool:
        """Render (or re-render) the image of one scene.

        Does not touch the project status. A failure is recorded in
        ``project.scene_errors`` and leaves the slot as it was. Unexpected
        errors are recorded the same way before they propagate.

        Returns:
            True when the slot was replaced.

        Raises:
            ValidationError: If the index is invalid or already busy.
        """
        script = self._require_index(index)
        if index in self.busy_images:
            raise StudioBusyError(f"Scene {index + 1} is already rendering")
        prompt = script.scenes[index].image_prompt
        if not prompt.strip():
            return False

        self._claim_image(index)
        try:
            image = await self._media.generate_image(prompt, self.project.aspect_ratio.value)
        except RemoteGenerationError as e:
            self._scene_failed(script, index, "rendering", e)
            return False
        except Exception as e:
            self._scene_failed(script, index, "rendering", e)
            raise
        finally:
            self._release_image(index)

        if self.project.script is not script:
            logger.warning(f"Discarding scene {index + 1} image: script was replaced")
            return False
        self.project.set_image(index, image)
        self.project.scene_errors.pop(index, None)
        return True

    async def generate_single_video(
        self,
        index: int,
        cancel: Optional[asyncio.Event] = None,
    ) -> bool:
        """Animate one scene's image into a clip.

        No-op when the scene has no image yet. Does not touch the project
        status; failures are recorded in ``project.scene_errors``.

        Args:
            index: Zero-based scene index.
            cancel: Optional event that stops polling when set. One is
                created when omitted so :meth:`cancel_video` can stop it.

        Returns:
            True when a clip was stored.

        Raises:
            ValidationError: If the index is invalid or already busy.
        """
        script = self._require_index(index)
        image = self.project.images[index]
        if not image:
            return False
        if index in self.busy_videos:
            raise StudioBusyError(f"Scene {index + 1} is already animating")

        cancel = cancel or asyncio.Event()
        self._video_cancels[index] = cancel
        self.busy_videos.add(index)
        try:
            state = await self._media.submit_video(
                prompt=script.scenes[index].image_prompt,
                image_b64=image,
                mime_type=VIDEO_SEED_MIME_TYPE,
                aspect_ratio=self.project.aspect_ratio.value,
                resolution=self._video_resolution,
            )
            state = await self._poller.wait(state, cancel=cancel)
            video = await self._media.download_video(state.uri)
        except RemoteGenerationError as e:
            self._scene_failed(script, index, "video generation", e)
            return False
        except Exception as e:
            self._scene_failed(script, index, "video generation", e)
            raise
        finally:
            self.busy_videos.discard(index)
            self._video_cancels.pop(index, None)

        if self.project.script is not script:
            logger.warning(f"Discarding scene {index + 1} clip: script was replaced")
            return False
        self.project.set_video(index, video)
        self.project.scene_errors.pop(index, None)
        return True

    def cancel_video(self, index: int) -> bool:
        """Ask an in-flight video job for ``index`` to stop polling."""
        event = self._video_cancels.get(index)
        if event is None:
            return False
        event.set()
        return True

    async def build_package(self) -> Optional[bytes]:
        """Bundle script, narration, images and clips into a ZIP archive.

        A packaging failure keeps every asset and leaves the project in
        COMPLETED with ``project.error`` set.

        Returns:
            The archive bytes, or None when packaging failed.

        Raises:
            ValidationError: If script or narration is missing, or an
                operation is in flight.
        """
        script = self._require_script()
        if not self.project.audio:
            raise ValidationError("No narration yet. Generate audio first.")
        self._ensure_idle()

        project = self.project
        project.status = GenerationStatus.ZIPPING
        try:
            package = build_package(script, project.audio, project.images, project.videos)
        except PackagingError as e:
            logger.error(f"Packaging failed: {e}")
            project.error = "Zipping failed."
            project.status = GenerationStatus.COMPLETED
            return None

        project.package = package
        project.status = GenerationStatus.COMPLETED
        return package

    def update_scene_text(self, index: int, text: str) -> None:
        script = self._require_index(index)
        script.scenes[index].text = text
        self.project.package = None

    def update_scene_prompt(self, index: int, prompt: str) -> None:
        script = self._require_index(index)
        script.scenes[index].image_prompt = prompt
        self.project.package = None

    def update_bgm_prompt(self, index: int, prompt: str) -> None:
        script = self._require_script()
        if not 0 <= index < len(script.bgm_prompts):
            raise ValidationError(
                f"BGM prompt index {index} out of range (0-{len(script.bgm_prompts) - 1})"
            )
        script.bgm_prompts[index] = prompt
        self.project.package = None

    def narration_duration(self) -> float:
        """Length of the narration track in seconds, 0.0 without audio."""
        return wav_duration(self.project.audio) if self.project.audio else 0.0

    def active_scene_index(self, elapsed: float, duration: Optional[float] = None) -> int:
        """Scene shown at ``elapsed`` seconds into the narration."""
        if duration is None:
            duration = self.narration_duration()
        return active_scene_index(elapsed, duration, self.project.scene_total)

    def active_subtitle(self, elapsed: float, duration: Optional[float] = None) -> str:
        """Narration line shown at ``elapsed`` seconds into the narration."""
        if duration is None:
            duration = self.narration_duration()
        return active_subtitle(self.project.script, elapsed, duration)
