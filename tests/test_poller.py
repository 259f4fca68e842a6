"""Tests for video job polling."""

import asyncio

import pytest

from shorts.errors import RemoteGenerationError, VideoJobCancelled, VideoJobTimeout
from shorts.services.base import JobStatus, VideoJobState
from shorts.services.video import VideoJobPoller

from conftest import FakeMedia, FakeSleep, run


def _submit(media: FakeMedia) -> VideoJobState:
    return run(media.submit_video("clip", "b64", "image/png", "9:16", "720p"))


def test_waits_until_done(media, sleep):
    media.pending_polls = 2
    poller = VideoJobPoller(media, poll_interval=3.0, max_polls=5, sleep=sleep)

    state = run(poller.wait(_submit(media)))

    assert state.status == JobStatus.COMPLETED
    assert state.uri == "https://videos/clip"
    assert sleep.delays == [3.0, 3.0, 3.0]


def test_already_done_does_not_poll(media, sleep):
    poller = VideoJobPoller(media, sleep=sleep)
    done = VideoJobState(job={}, done=True, uri="https://videos/ready")

    assert run(poller.wait(done)) is done
    assert sleep.delays == []


def test_failed_job_raises(media, sleep):
    media.video_error = "blocked by safety filter"
    poller = VideoJobPoller(media, sleep=sleep)

    with pytest.raises(RemoteGenerationError, match="safety filter"):
        run(poller.wait(_submit(media)))


def test_done_without_uri_is_failure(media, sleep):
    poller = VideoJobPoller(media, sleep=sleep)
    state = VideoJobState(job={}, done=True)

    assert state.status == JobStatus.FAILED
    with pytest.raises(RemoteGenerationError):
        run(poller.wait(state))


def test_gives_up_after_max_polls(media, sleep):
    media.pending_polls = 100
    poller = VideoJobPoller(media, poll_interval=1.0, max_polls=4, sleep=sleep)

    with pytest.raises(VideoJobTimeout):
        run(poller.wait(_submit(media)))

    assert len(sleep.delays) == 4


def test_backoff_is_capped(media, sleep):
    media.pending_polls = 5
    poller = VideoJobPoller(
        media, poll_interval=2.0, max_polls=10, backoff=2.0, max_interval=10.0, sleep=sleep
    )

    run(poller.wait(_submit(media)))

    assert sleep.delays == [2.0, 4.0, 8.0, 10.0, 10.0, 10.0]


def test_transient_refresh_errors_keep_polling(sleep):
    class FlakyMedia(FakeMedia):
        def __init__(self):
            super().__init__()
            self.failures = 2

        async def refresh_video(self, state):
            if self.failures:
                self.failures -= 1
                raise RemoteGenerationError("503")
            return await super().refresh_video(state)

    media = FlakyMedia()
    poller = VideoJobPoller(media, max_polls=5, sleep=sleep)

    state = run(poller.wait(_submit(media)))

    assert state.uri == "https://videos/clip"
    assert len(sleep.delays) == 3


def test_timeout_reports_last_error(sleep):
    class BrokenMedia(FakeMedia):
        async def refresh_video(self, state):
            raise RemoteGenerationError("service unavailable")

    media = BrokenMedia()
    poller = VideoJobPoller(media, max_polls=2, sleep=sleep)

    with pytest.raises(VideoJobTimeout, match="service unavailable"):
        run(poller.wait(_submit(media)))


def test_cancel_during_sleep(media):
    media.pending_polls = 100
    cancel = asyncio.Event()
    calls = []

    async def cancelling_sleep(delay):
        calls.append(delay)
        if len(calls) == 2:
            cancel.set()

    poller = VideoJobPoller(media, max_polls=10, sleep=cancelling_sleep)

    with pytest.raises(VideoJobCancelled):
        run(poller.wait(_submit(media), cancel=cancel))

    assert len(calls) == 2


@pytest.mark.parametrize(
    "kwargs",
    [{"poll_interval": 0}, {"max_polls": 0}, {"backoff": 0.5}],
)
def test_rejects_invalid_settings(media, kwargs):
    with pytest.raises(ValueError):
        VideoJobPoller(media, sleep=FakeSleep(), **kwargs)
