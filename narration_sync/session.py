"""
Session state for one loaded video.

A session owns the video reference, the current commentary store, its
narration resources, and an epoch that is bumped whenever the video or store
changes.  Asynchronous work (preloading) checks the epoch before installing
results so that a pass started for an old video never lands on a new one.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from .commentary_store import CommentaryStore, Fatal, Ok, ParseResult, PartialOk, normalize_entries
from .preloader import NarrationPreloader, NarrationResource, PreloadFatalError
from .synchronizer import PlaybackSynchronizer

logger = logging.getLogger(__name__)


class NarrationSession:
    """Page-level owner of commentary, narration, and playback."""

    def __init__(self, preloader: NarrationPreloader, synchronizer: PlaybackSynchronizer) -> None:
        self.preloader = preloader
        self.synchronizer = synchronizer

        self.video_reference: Optional[str] = None
        self.duration: Optional[float] = None
        self.store: Optional[CommentaryStore] = None
        self.resources: list[Optional[NarrationResource]] = []
        self.last_error: Optional[str] = None
        self._epoch = 0

    @property
    def epoch(self) -> int:
        return self._epoch

    # ------------------------------------------------------------------
    # Video
    # ------------------------------------------------------------------

    def load_video(self, reference: str, duration: Optional[float] = None) -> None:
        """Switch to a new video, discarding everything tied to the old one."""
        self._epoch += 1
        self.preloader.invalidate()
        self.synchronizer.reset()
        self.video_reference = reference
        self.duration = duration
        self.store = None
        self.resources = []
        self.last_error = None
        logger.info("Loaded video %s (duration=%s)", reference, duration)

    # ------------------------------------------------------------------
    # Commentary
    # ------------------------------------------------------------------

    def set_commentary(self, items: Any) -> ParseResult:
        """
        Replace the commentary wholesale.

        On success the synchronizer is loaded with the new store and no
        narration yet; call ``prepare_narration()`` to resolve audio.  A
        ``Fatal`` result leaves the current store untouched.
        """
        result = items if isinstance(items, (Ok, PartialOk, Fatal)) else normalize_entries(items)
        if isinstance(result, Fatal):
            self.last_error = result.reason
            logger.error("Commentary rejected: %s", result.reason)
            return result

        self._epoch += 1
        self.preloader.invalidate()
        self.store = CommentaryStore.from_result(result, self.video_reference, self.duration)
        self.resources = [None] * len(self.store)
        self.last_error = None
        self.synchronizer.load(self.store)
        return result

    async def prepare_narration(self) -> Optional[list[Optional[NarrationResource]]]:
        """
        Preload narration for the current store.

        Returns the resource list, or ``None`` if the video or store changed
        while the pass was running (the late results are dropped).

        Raises:
            PreloadFatalError: the speech service is unusable; playback stays
                available without narration.
        """
        if self.store is None:
            raise ValueError("No commentary to narrate")

        epoch = self._epoch
        store = self.store
        try:
            resources = await self.preloader.preload(store)
        except PreloadFatalError as e:
            if epoch == self._epoch:
                self.last_error = str(e)
                self.synchronizer.load(store)
            raise

        if resources is None or epoch != self._epoch or store is not self.store:
            logger.info("Discarding narration from a stale preload pass")
            return None

        self.resources = resources
        self.synchronizer.load(store, resources)
        return resources

    # ------------------------------------------------------------------
    # Export / import
    # ------------------------------------------------------------------

    def export(self) -> dict:
        """The downloadable ``{videoPath, timecodeList}`` document."""
        if self.store is None:
            raise ValueError("No key moments to download.")
        return {
            "videoPath": self.video_reference,
            "timecodeList": self.store.to_timecode_list(),
        }

    def save(self, path: str | Path) -> Path:
        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(json.dumps(self.export(), indent=2, ensure_ascii=False))
        logger.info("Saved key moments to %s", out)
        return out


def load_session_file(path: str | Path) -> tuple[Optional[str], ParseResult]:
    """Read a ``key_moments.json`` file back into a parse result."""
    data = json.loads(Path(path).read_text())
    if not isinstance(data, dict):
        return None, Fatal("Session file must be a JSON object")
    return data.get("videoPath"), normalize_entries(data.get("timecodeList"))
