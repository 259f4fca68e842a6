"""Google Gemini / Veo client wrapper via the google-genai SDK."""

import asyncio
import base64
import logging
from typing import Any, Optional

import httpx
import requests
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ..config import config
from ..editor.audio import decode_base64_audio
from ..errors import RemoteGenerationError
from .base import VideoJobState

logger = logging.getLogger(__name__)


class GeminiClient:
    """Client wrapper for Gemini text, speech and image models and Veo video jobs.

    This client handles:
    - JSON text generation for script drafting
    - Narration synthesis returning raw PCM
    - Per-scene image rendering
    - Submitting, refreshing and downloading image-to-video jobs
    """

    DOWNLOAD_TIMEOUT = 120.0  # seconds

    def __init__(
        self,
        api_key: Optional[str] = None,
        script_model: Optional[str] = None,
        tts_model: Optional[str] = None,
        image_model: Optional[str] = None,
        video_model: Optional[str] = None,
        narration_language: Optional[str] = None,
    ) -> None:
        """Initialize the Gemini client.

        Args:
            api_key: Gemini API key. Defaults to GEMINI_API_KEY env var.
            script_model: Model used for script text. Defaults to config.script_model.
            tts_model: Speech model. Defaults to config.tts_model.
            image_model: Image model. Defaults to config.image_model.
            video_model: Video model. Defaults to config.video_model.
            narration_language: Language the narrator speaks.
        """
        self._api_key = api_key or config.gemini_api_key
        if not self._api_key:
            raise ValueError("Gemini API key not provided. Set GEMINI_API_KEY env var.")

        self._client = genai.Client(api_key=self._api_key)
        self._script_model = script_model or config.script_model
        self._tts_model = tts_model or config.tts_model
        self._image_model = image_model or config.image_model
        self._video_model = video_model or config.video_model
        self._narration_language = narration_language or config.narration_language

    @property
    def model(self) -> str:
        """Return the script model being used."""
        return self._script_model

    def create_message(
        self,
        prompt: str,
        max_tokens: int = 4096,
        system: Optional[str] = None,
        temperature: float = 0.7,
    ) -> str:
        """Generate a JSON text response.

        Args:
            prompt: The user prompt to send.
            max_tokens: Maximum tokens in the response.
            system: Optional system instruction.
            temperature: Sampling temperature.

        Returns:
            The text of the response.

        Raises:
            RemoteGenerationError: If the request fails or returns no text.
        """
        logger.debug(f"Sending script request to {self._script_model}")
        try:
            response = self._client.models.generate_content(
                model=self._script_model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    system_instruction=system,
                    max_output_tokens=max_tokens,
                    temperature=temperature,
                    response_mime_type="application/json",
                ),
            )
        except (genai_errors.APIError, httpx.HTTPError) as e:
            logger.error(f"Gemini API error: {e}")
            raise RemoteGenerationError(f"Script generation failed: {e}") from e

        if not response.text:
            raise RemoteGenerationError("Script generation returned an empty response")
        return response.text

    async def synthesize_speech(self, text: str, voice: str) -> bytes:
        """Synthesize narration for ``text``.

        Returns:
            Raw 16-bit little-endian mono PCM at 24kHz.
        """
        logger.info(f"Synthesizing narration ({len(text)} chars, voice {voice})")
        try:
            response = await self._client.aio.models.generate_content(
                model=self._tts_model,
                contents=f"Read aloud in a polished, lively {self._narration_language} voice: {text}",
                config=types.GenerateContentConfig(
                    response_modalities=["AUDIO"],
                    speech_config=types.SpeechConfig(
                        voice_config=types.VoiceConfig(
                            prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=voice),
                        ),
                    ),
                ),
            )
        except (genai_errors.APIError, httpx.HTTPError) as e:
            logger.error(f"Speech synthesis API error: {e}")
            raise RemoteGenerationError(f"Voice synthesis failed: {e}") from e

        data = _first_inline_data(response)
        if not data:
            raise RemoteGenerationError("Voice synthesis failed.")
        if isinstance(data, str):
            try:
                return decode_base64_audio(data)
            except ValueError as e:
                raise RemoteGenerationError(f"Voice synthesis returned invalid audio: {e}") from e
        return data

    async def generate_image(self, prompt: str, aspect_ratio: str) -> str:
        """Render one image.

        Returns:
            The image as a base64 string.
        """
        logger.info(f"Generating image: {prompt[:50]}...")
        try:
            response = await self._client.aio.models.generate_content(
                model=self._image_model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    image_config=types.ImageConfig(aspect_ratio=aspect_ratio),
                ),
            )
        except (genai_errors.APIError, httpx.HTTPError) as e:
            logger.error(f"Image API error: {e}")
            raise RemoteGenerationError(f"Image generation failed: {e}") from e

        data = _first_inline_data(response)
        if not data:
            raise RemoteGenerationError("No image data in response")
        if isinstance(data, str):
            return data
        return base64.b64encode(data).decode("ascii")

    async def submit_video(
        self,
        prompt: str,
        image_b64: str,
        mime_type: str,
        aspect_ratio: str,
        resolution: str,
    ) -> VideoJobState:
        """Start an image-to-video job seeded with a scene image."""
        logger.info(f"Starting video generation: {prompt[:50]}...")
        try:
            operation = await self._client.aio.models.generate_videos(
                model=self._video_model,
                prompt=prompt,
                image=types.Image(
                    image_bytes=base64.b64decode(image_b64),
                    mime_type=mime_type,
                ),
                config=types.GenerateVideosConfig(
                    number_of_videos=1,
                    resolution=resolution,
                    aspect_ratio=aspect_ratio,
                ),
            )
        except (genai_errors.APIError, httpx.HTTPError) as e:
            logger.error(f"Video API error: {e}")
            raise RemoteGenerationError(f"Video generation failed: {e}") from e

        return _operation_state(operation)

    async def refresh_video(self, state: VideoJobState) -> VideoJobState:
        """Fetch the latest status of a video job."""
        try:
            operation = await self._client.aio.operations.get(state.job)
        except (genai_errors.APIError, httpx.HTTPError) as e:
            raise RemoteGenerationError(f"Video status check failed: {e}") from e
        return _operation_state(operation)

    async def download_video(self, uri: str) -> bytes:
        """Download a finished clip; the API key travels as the ``key`` query parameter."""
        logger.debug(f"Downloading video from {uri}")
        try:
            response = await asyncio.to_thread(
                requests.get,
                uri,
                params={"key": self._api_key},
                timeout=self.DOWNLOAD_TIMEOUT,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Video download failed: {e}")
            raise RemoteGenerationError(f"Video download failed: {e}") from e

        if not response.content:
            raise RemoteGenerationError("Downloaded video is empty")
        return response.content


def _first_inline_data(response: Any) -> Optional[Any]:
    """Return the inline data of the first part carrying any."""
    for candidate in response.candidates or []:
        content = candidate.content
        if content is None:
            continue
        for part in content.parts or []:
            if part.inline_data is not None and part.inline_data.data:
                return part.inline_data.data
    return None


def _operation_state(operation: Any) -> VideoJobState:
    state = VideoJobState(job=operation, done=bool(operation.done))
    if not state.done:
        return state

    error = operation.error
    if error:
        message = error.get("message") if isinstance(error, dict) else None
        state.error_message = str(message or error)
        return state

    videos = operation.response.generated_videos if operation.response else None
    if videos and videos[0].video is not None:
        state.uri = videos[0].video.uri
    if not state.uri:
        state.error_message = "Video job finished without a video"
    return state
