"""
Playback adapters: the video clock, narration output, and the time-update
driver that stands in for a browser's ``timeupdate`` events.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, Protocol

from .config import TIME_UPDATE_INTERVAL
from .preloader import NarrationResource

logger = logging.getLogger(__name__)


class VideoSource(Protocol):
    duration: Optional[float]

    @property
    def current_time(self) -> float: ...

    @property
    def paused(self) -> bool: ...

    @property
    def ended(self) -> bool: ...

    def play(self) -> None: ...

    def pause(self) -> None: ...

    def seek(self, seconds: float) -> None: ...


class NarrationPlayer(Protocol):
    async def play(self, resource: NarrationResource) -> None:
        """Play *resource* from its beginning; return when it finishes."""
        ...


# ---------------------------------------------------------------------------
# Simulated video
# ---------------------------------------------------------------------------

class SimulatedVideo:
    """
    A video position that advances with *clock* while playing.

    Position is clamped to ``[0, duration]`` when the duration is known.
    """

    def __init__(self, duration: Optional[float] = None, clock: Callable[[], float] = time.monotonic) -> None:
        self.duration = duration
        self._clock = clock
        self._position = 0.0
        self._started_at: Optional[float] = None

    def _clamp(self, seconds: float) -> float:
        seconds = max(0.0, seconds)
        if self.duration is not None:
            seconds = min(seconds, self.duration)
        return seconds

    @property
    def current_time(self) -> float:
        if self._started_at is None:
            return self._position
        return self._clamp(self._position + (self._clock() - self._started_at))

    @property
    def paused(self) -> bool:
        return self._started_at is None

    @property
    def ended(self) -> bool:
        return self.duration is not None and self.current_time >= self.duration

    def play(self) -> None:
        if self._started_at is None:
            self._started_at = self._clock()

    def pause(self) -> None:
        if self._started_at is not None:
            self._position = self.current_time
            self._started_at = None

    def seek(self, seconds: float) -> None:
        self._position = self._clamp(seconds)
        if self._started_at is not None:
            self._started_at = self._clock()


# ---------------------------------------------------------------------------
# Narration output
# ---------------------------------------------------------------------------

class PacedNarrationPlayer:
    """
    Narration player that holds for each resource's estimated spoken length.

    Used for dry runs and the replay CLI; *on_narrate* is told about every
    utterance as it starts.
    """

    def __init__(
        self,
        on_narrate: Optional[Callable[[NarrationResource], None]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.on_narrate = on_narrate
        self._sleep = sleep

    async def play(self, resource: NarrationResource) -> None:
        if resource.revoked:
            logger.warning("Narration %d was revoked before playback", resource.index)
            return
        logger.info("Narrating [%d] %s", resource.index, resource.text)
        if self.on_narrate:
            self.on_narrate(resource)
        await self._sleep(resource.estimated_duration)


# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------

async def run_time_updates(
    sync,
    video: VideoSource,
    interval: float = TIME_UPDATE_INTERVAL,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> None:
    """
    Feed ``sync.time_update()`` until *video* ends.

    Mirrors the browser event loop: periodic time updates, then a single
    ``ended`` notification, then wait for any narration still speaking.
    """
    while not video.ended:
        sync.time_update()
        await sleep(interval)
    sync.time_update()
    sync.ended()
    await sync.drain()
