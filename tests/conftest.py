"""Shared fakes for the generation services."""

import asyncio
import base64
from typing import Dict, List, Optional

import pytest

from shorts.errors import RemoteGenerationError
from shorts.models import Scene, Script
from shorts.services.base import ScriptRequest, VideoJobState
from shorts.services.video import VideoJobPoller
from shorts.studio import Studio


def make_script(count: int = 3, bgm: Optional[List[str]] = None) -> Script:
    return Script(
        title="Winter Street Food",
        scenes=[
            Scene(text=f"Line {i + 1}", image_prompt=f"Prompt {i + 1}")
            for i in range(count)
        ],
        bgm_prompts=bgm if bgm is not None else ["Lo-fi beat"],
    )


def png_b64(label: str) -> str:
    return base64.b64encode(f"png-{label}".encode()).decode("ascii")


class FakeWriter:
    def __init__(self, script: Optional[Script] = None, error: Optional[str] = None):
        self.script = script or make_script()
        self.error = error
        self.requests: List[ScriptRequest] = []

    async def write_script(self, request: ScriptRequest) -> Script:
        self.requests.append(request)
        if self.error:
            raise RemoteGenerationError(self.error)
        return self.script.model_copy(deep=True)


class FakeMedia:
    """Records calls; failures and pauses are configured per prompt.

    ``call_gates`` holds one event per upcoming call of a prompt, consumed in
    call order; ``gates`` holds one event shared by every call.
    """

    def __init__(self):
        self.calls: List[str] = []
        self.fail_prompts: set = set()
        self.raise_on: Dict[str, BaseException] = {}
        self.gates: Dict[str, asyncio.Event] = {}
        self.call_gates: Dict[str, List[asyncio.Event]] = {}
        self.speech_error: Optional[str] = None
        self.pcm = b"\x01\x00" * 48000  # 2s of 16-bit mono at 24kHz
        self.pending_polls = 0
        self.video_error: Optional[str] = None
        self.videos_downloaded: List[str] = []

    async def synthesize_speech(self, text: str, voice: str) -> bytes:
        self.calls.append(f"speech:{text}")
        if self.speech_error:
            raise RemoteGenerationError(self.speech_error)
        return self.pcm

    async def generate_image(self, prompt: str, aspect_ratio: str) -> str:
        self.calls.append(f"image:{prompt}")
        queued = self.call_gates.get(prompt)
        gate = queued.pop(0) if queued else self.gates.get(prompt)
        if gate is not None:
            await gate.wait()
        if prompt in self.raise_on:
            raise self.raise_on[prompt]
        if prompt in self.fail_prompts:
            raise RemoteGenerationError(f"render failed for {prompt}")
        return png_b64(prompt)

    async def submit_video(self, prompt, image_b64, mime_type, aspect_ratio, resolution):
        self.calls.append(f"video:{prompt}:{mime_type}:{aspect_ratio}:{resolution}")
        return VideoJobState(job={"prompt": prompt, "polls": 0})

    async def refresh_video(self, state: VideoJobState) -> VideoJobState:
        job = dict(state.job)
        job["polls"] += 1
        if job["polls"] <= self.pending_polls:
            return VideoJobState(job=job)
        if self.video_error:
            return VideoJobState(job=job, done=True, error_message=self.video_error)
        return VideoJobState(job=job, done=True, uri=f"https://videos/{job['prompt']}")

    async def download_video(self, uri: str) -> bytes:
        self.videos_downloaded.append(uri)
        return f"mp4:{uri}".encode()


class FakeSleep:
    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def writer():
    return FakeWriter()


@pytest.fixture
def media():
    return FakeMedia()


@pytest.fixture
def sleep():
    return FakeSleep()


@pytest.fixture
def studio(writer, media, sleep):
    poller = VideoJobPoller(media, poll_interval=5.0, max_polls=10, sleep=sleep)
    return Studio(writer=writer, media=media, poller=poller, voice="Kore")


def run(coro):
    return asyncio.run(coro)


async def wait_until(condition, attempts: int = 100) -> None:
    """Yield to the event loop until ``condition()`` holds."""
    for _ in range(attempts):
        if condition():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition never became true")
