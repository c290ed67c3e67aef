"""
Timecode-synchronized narration playback.

The synchronizer owns a pointer into the commentary store and reacts to
video lifecycle events (start, time update, pause, resume, seek, end) to
decide when each entry's narration should start.  Narration is aligned to
the *video's* clock, not wall-clock time, and speech length is decoupled
from video length:

* Each entry fires at most once per forward pass.
* When several entries become due in one update (fast-forward, long
  narration) only the latest fires; the skipped ones are dropped.
* Pausing stops the video only; a sentence in flight is allowed to finish.
* A backward seek moves the pointer back to the entry at the landing
  point without replaying it; narration picks up at the next crossing.

Every scheduled callback carries the epoch it was created in.  ``load()``
and ``reset()`` bump the epoch, so callbacks from an abandoned store are
ignored.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional, Sequence

from .commentary_store import CommentaryStore
from .playback import NarrationPlayer, VideoSource
from .preloader import NarrationResource

logger = logging.getLogger(__name__)


class SynchronizerStateError(RuntimeError):
    """Raised for transitions that are not valid in the current state."""
    pass


class SyncState(str, Enum):
    IDLE = "idle"
    READY = "ready"
    PLAYING = "playing"
    NARRATING = "narrating"
    PAUSED = "paused"


@dataclass
class PlaybackCursor:
    current_index: Optional[int] = None
    is_video_playing: bool = False
    is_narrating: bool = False

    def reset(self) -> None:
        self.current_index = None
        self.is_video_playing = False
        self.is_narrating = False


class PlaybackSynchronizer:
    """Drives narration from video events.  Must be used inside an event loop."""

    def __init__(
        self,
        video: VideoSource,
        player: NarrationPlayer,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.video = video
        self.player = player
        self._sleep = sleep

        self.state = SyncState.IDLE
        self.cursor = PlaybackCursor()
        self.store: Optional[CommentaryStore] = None
        self.resources: list[Optional[NarrationResource]] = []
        self.fired: list[int] = []

        self._epoch = 0
        self._narration_task: Optional[asyncio.Task] = None
        self._next_check_task: Optional[asyncio.Task] = None

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def playable_count(self) -> int:
        return sum(1 for r in self.resources if r is not None)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load(
        self,
        store: CommentaryStore,
        resources: Optional[Sequence[Optional[NarrationResource]]] = None,
    ) -> None:
        """Install a store (and its narration) and enter READY."""
        if resources is None:
            resources = [None] * len(store)
        if len(resources) != len(store):
            raise ValueError(
                f"Got {len(resources)} narration resources for {len(store)} entries"
            )

        self._cancel_tasks()
        self._epoch += 1
        self.store = store
        self.resources = list(resources)
        self.fired = []
        self.cursor.reset()
        self.state = SyncState.READY
        logger.info(
            "Synchronizer ready: %d entries, %d with narration",
            len(store),
            self.playable_count,
        )

    def reset(self) -> None:
        """Return to IDLE, revoking every narration resource."""
        self._cancel_tasks()
        self._epoch += 1
        for resource in self.resources:
            if resource is not None:
                resource.revoke()
        self.store = None
        self.resources = []
        self.fired = []
        self.cursor.reset()
        self.state = SyncState.IDLE

    def start(self) -> None:
        """
        Play from the top: seek to 0, play, fire anything due at 0.

        A sentence still speaking from an earlier pass is cut off.
        """
        self._require_loaded("start")
        self._cancel_tasks()
        self._epoch += 1
        self.video.seek(0.0)
        self.video.play()
        self.cursor.current_index = None
        self.cursor.is_video_playing = True
        self.state = SyncState.PLAYING
        self._check_triggers()

    def pause(self) -> None:
        """Pause the video; narration in flight keeps speaking."""
        if self.state not in (SyncState.PLAYING, SyncState.NARRATING):
            return
        self.video.pause()
        self.cursor.is_video_playing = False
        self._cancel_next_check()
        self.state = SyncState.PAUSED

    def resume(self) -> None:
        if self.state is not SyncState.PAUSED:
            return
        self.video.play()
        self.cursor.is_video_playing = True
        self.state = SyncState.NARRATING if self.cursor.is_narrating else SyncState.PLAYING
        self._check_triggers()

    def seek(self, seconds: float) -> None:
        """
        Jump to *seconds* and keep playing.

        Seeking back before the current entry's trigger point moves the
        pointer to the latest entry at or before the landing time, which is
        treated as already narrated.
        """
        self._require_loaded("seek")
        self._cancel_next_check()
        self.video.seek(seconds)
        t = self.video.current_time

        current = self.cursor.current_index
        if current is not None and t < self.store[current].seconds:
            self.cursor.current_index = self.store.latest_index_at(t)
            logger.debug("Backward seek to %.2fs: pointer %s -> %s", t, current, self.cursor.current_index)

        if not self.cursor.is_video_playing:
            self.video.play()
            self.cursor.is_video_playing = True
        self.state = SyncState.NARRATING if self.cursor.is_narrating else SyncState.PLAYING
        self._check_triggers()

    def time_update(self) -> None:
        """Video position changed."""
        if self.state is SyncState.PLAYING:
            self._check_triggers()

    def ended(self) -> None:
        """Video reached its end: stop triggering, keep any sentence in flight."""
        if self.state is SyncState.IDLE:
            return
        self._cancel_next_check()
        self.cursor.is_video_playing = False
        self.state = SyncState.READY

    async def drain(self) -> None:
        """Wait for the narration currently speaking, if any."""
        task = self._narration_task
        if task is not None and not task.done():
            await asyncio.wait({task})

    # ------------------------------------------------------------------
    # Triggering
    # ------------------------------------------------------------------

    def _check_triggers(self) -> None:
        if self.state is not SyncState.PLAYING or self.store is None:
            return
        t = self.video.current_time
        j = self.store.latest_index_at(t, after=self.cursor.current_index)
        if j is None:
            if self._next_check_task is None:
                self._schedule_next_check()
            return
        self._fire(j, t)

    def _fire(self, index: int, t: float) -> None:
        self._cancel_next_check()
        skipped = index - (self.cursor.current_index + 1 if self.cursor.current_index is not None else 0)
        if skipped:
            logger.debug("Collapsing %d stale entries before %d", skipped, index)
        self.cursor.current_index = index
        self.fired.append(index)

        resource = self.resources[index]
        if resource is None:
            logger.info("Entry %d at %.2fs has no narration, skipping audio", index, t)
            self._schedule_next_check()
            return

        self.cursor.is_narrating = True
        self.state = SyncState.NARRATING
        self._narration_task = asyncio.create_task(self._narrate(resource, self._epoch))

    async def _narrate(self, resource: NarrationResource, epoch: int) -> None:
        try:
            await self.player.play(resource)
        except Exception as e:
            logger.warning("Narration %d failed during playback: %s", resource.index, e)

        if epoch != self._epoch:
            return
        self.cursor.is_narrating = False
        if self.state is SyncState.NARRATING:
            self.state = SyncState.PLAYING
            self._schedule_next_check()

    def _schedule_next_check(self) -> None:
        self._cancel_next_check()
        if self.state is not SyncState.PLAYING or self.store is None:
            return
        current = self.cursor.current_index
        nxt = 0 if current is None else current + 1
        if nxt >= len(self.store):
            return
        delay = max(0.0, self.store[nxt].seconds - self.video.current_time)
        self._next_check_task = asyncio.create_task(self._check_after(delay, self._epoch))

    async def _check_after(self, delay: float, epoch: int) -> None:
        await self._sleep(delay)
        if epoch != self._epoch:
            return
        self._next_check_task = None
        self._check_triggers()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_loaded(self, action: str) -> None:
        if self.state is SyncState.IDLE or self.store is None:
            raise SynchronizerStateError(f"Cannot {action}: no commentary loaded")

    def _cancel_next_check(self) -> None:
        task = self._next_check_task
        self._next_check_task = None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    def _cancel_tasks(self) -> None:
        self._cancel_next_check()
        task = self._narration_task
        self._narration_task = None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
        self.cursor.is_narrating = False
