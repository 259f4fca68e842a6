"""Polling of long-running image-to-video jobs."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from ..errors import RemoteGenerationError, VideoJobCancelled, VideoJobTimeout
from .base import JobStatus, MediaGenerator, VideoJobState

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class VideoJobPoller:
    """Waits for a submitted video job to reach a terminal state.

    Status is checked on a fixed interval, optionally stretched by a
    multiplicative backoff up to ``max_interval``. Polling stops after
    ``max_polls`` checks or when the caller sets the cancel event. The sleep
    function is injectable so tests can drive the loop without delays.
    """

    DEFAULT_POLL_INTERVAL = 5.0  # seconds
    DEFAULT_MAX_POLLS = 120
    DEFAULT_MAX_INTERVAL = 30.0

    def __init__(
        self,
        media: MediaGenerator,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_polls: int = DEFAULT_MAX_POLLS,
        backoff: float = 1.0,
        max_interval: float = DEFAULT_MAX_INTERVAL,
        sleep: Optional[Sleep] = None,
    ) -> None:
        """Initialize the poller.

        Args:
            media: Media generator used to refresh job status.
            poll_interval: Seconds to wait before each status check.
            max_polls: Maximum number of status checks.
            backoff: Factor applied to the interval after each check.
            max_interval: Upper bound for the interval when backing off.
            sleep: Awaitable sleep function. Defaults to asyncio.sleep.
        """
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        if max_polls < 1:
            raise ValueError("max_polls must be at least 1")
        if backoff < 1.0:
            raise ValueError("backoff must be >= 1.0")

        self._media = media
        self._poll_interval = poll_interval
        self._max_polls = max_polls
        self._backoff = backoff
        self._max_interval = max(max_interval, poll_interval)
        self._sleep = sleep or asyncio.sleep

    async def wait(
        self,
        state: VideoJobState,
        cancel: Optional[asyncio.Event] = None,
    ) -> VideoJobState:
        """Poll ``state`` until the job completes.

        Args:
            state: State returned by the submit call.
            cancel: Optional event; when set, polling stops before the next check.

        Returns:
            The completed state, carrying the video URI.

        Raises:
            VideoJobCancelled: If ``cancel`` was set.
            VideoJobTimeout: If the job did not finish within ``max_polls`` checks.
            RemoteGenerationError: If the job finished without a video.
        """
        interval = self._poll_interval
        polls = 0
        last_error: Optional[str] = None

        while not state.done:
            if cancel is not None and cancel.is_set():
                raise VideoJobCancelled(f"Video job cancelled after {polls} checks")
            if polls >= self._max_polls:
                detail = f" (last error: {last_error})" if last_error else ""
                raise VideoJobTimeout(
                    f"Video job did not finish after {polls} checks{detail}"
                )

            await self._sleep(interval)
            if cancel is not None and cancel.is_set():
                raise VideoJobCancelled(f"Video job cancelled after {polls} checks")

            polls += 1
            logger.debug(f"Checking video job (attempt {polls}/{self._max_polls})")
            try:
                state = await self._media.refresh_video(state)
            except RemoteGenerationError as e:
                last_error = str(e)
                logger.warning(f"Error checking video job status: {e}")

            interval = min(interval * self._backoff, self._max_interval)

        if state.status != JobStatus.COMPLETED:
            message = state.error_message or "Video job finished without a video"
            logger.error(f"Video job failed: {message}")
            raise RemoteGenerationError(message)

        logger.info(f"Video job completed after {polls} checks")
        return state
