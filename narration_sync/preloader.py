"""
Narration preloading.

Resolves every commentary entry to playable audio before playback starts.
Entries are synthesized one at a time, in index order, to stay inside the
speech provider's rate limits.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

import httpx

from clients.errors import CredentialsError, SpeechSynthesisError

from .commentary_store import CommentaryStore
from .config import MAX_NARRATION_SECONDS, MIN_NARRATION_SECONDS, WORDS_PER_MINUTE

logger = logging.getLogger(__name__)


class PreloadFatalError(Exception):
    """Raised when the speech transport itself is unusable."""
    pass


class SpeechSynthesizer(Protocol):
    async def synthesize(
        self,
        text: str,
        voice_id: Optional[str] = None,
        excitement_level: Optional[int] = None,
    ) -> dict: ...


def estimate_speech_duration(text: str, words_per_minute: float = WORDS_PER_MINUTE) -> float:
    """Rough spoken length of *text* in seconds."""
    duration = (len(text.split()) / words_per_minute) * 60
    return max(MIN_NARRATION_SECONDS, min(MAX_NARRATION_SECONDS, duration))


class NarrationResource:
    """Synthesized audio for one commentary entry."""

    __slots__ = ("index", "text", "audio", "mime_type", "excitement_level", "source", "estimated_duration")

    def __init__(
        self,
        index: int,
        text: str,
        audio: bytes,
        mime_type: str = "audio/mpeg",
        excitement_level: Optional[int] = None,
        source: str = "elevenlabs",
    ) -> None:
        self.index = index
        self.text = text
        self.audio: Optional[bytes] = audio
        self.mime_type = mime_type
        self.excitement_level = excitement_level
        self.source = source
        self.estimated_duration = estimate_speech_duration(text)

    @property
    def revoked(self) -> bool:
        return self.audio is None

    def revoke(self) -> None:
        """Release the audio buffer; the resource can no longer be played."""
        self.audio = None

    def __repr__(self) -> str:
        state = "revoked" if self.revoked else f"{len(self.audio)} bytes"
        return f"NarrationResource({self.index}, {self.source!r}, {state})"


class NarrationPreloader:
    """
    Sequential text-to-speech resolver with pass invalidation.

    Only the most recent pass is live.  Starting a new pass, or calling
    ``invalidate()``, abandons the previous one: it stops at its next
    suspension point and returns ``None`` instead of a resource list.
    """

    def __init__(self, synthesizer: SpeechSynthesizer, voice_id: Optional[str] = None) -> None:
        self.synthesizer = synthesizer
        self.voice_id = voice_id
        self.is_loading = False
        self.is_ready = False
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def invalidate(self) -> None:
        """Abandon any in-flight pass."""
        self._generation += 1
        self.is_loading = False
        self.is_ready = False

    async def preload(self, store: CommentaryStore) -> Optional[list[Optional[NarrationResource]]]:
        """
        Resolve every entry of *store*.

        Returns a list aligned with ``store.entries`` holding a resource or
        ``None`` per entry, or ``None`` if this pass was abandoned.

        Raises:
            PreloadFatalError: credentials are missing or rejected.
        """
        self._generation += 1
        generation = self._generation
        self.is_loading = True
        self.is_ready = False

        resources: list[Optional[NarrationResource]] = []
        try:
            for index, entry in enumerate(store):
                try:
                    result: dict[str, Any] = await self.synthesizer.synthesize(
                        entry.text,
                        voice_id=self.voice_id,
                        excitement_level=entry.excitement_level,
                    )
                except CredentialsError as e:
                    raise PreloadFatalError(f"Failed to load TTS audio: {e}") from e
                except (SpeechSynthesisError, httpx.HTTPError) as e:
                    if generation != self._generation:
                        return None
                    logger.warning("Narration %d failed, continuing without it: %s", index, e)
                    resources.append(None)
                    continue

                if generation != self._generation:
                    logger.info("Preload pass %d abandoned at entry %d", generation, index)
                    return None

                resources.append(
                    NarrationResource(
                        index=index,
                        text=entry.text,
                        audio=result["audio"],
                        mime_type=result.get("mime_type", "audio/mpeg"),
                        excitement_level=entry.excitement_level,
                        source=result.get("source", "elevenlabs"),
                    )
                )
        finally:
            if generation == self._generation:
                self.is_loading = False

        self.is_ready = True
        ready = sum(1 for r in resources if r is not None)
        logger.info("Preloaded %d/%d narrations", ready, len(resources))
        return resources
