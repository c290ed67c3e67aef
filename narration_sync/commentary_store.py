"""
Commentary store and the entry normalization boundary.

Model replies are unreliable: a single bad entry must not throw away the
rest.  ``normalize_entries`` turns whatever list the model produced into a
tagged ``ParseResult``; ``CommentaryStore.create`` wraps the usable entries
in an immutable, index-ordered store.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, Union

from .config import EXCITEMENT_MARKER_PATTERN, EXCITEMENT_MAX, EXCITEMENT_MIN
from .timecode import TimecodeError, format_timecode, parse_timecode

logger = logging.getLogger(__name__)

_EXCITEMENT_MARKER_RE = re.compile(EXCITEMENT_MARKER_PATTERN, re.IGNORECASE)


class CommentaryFormatError(ValueError):
    """Raised when a commentary payload has no usable entries."""
    pass


@dataclass(frozen=True)
class CommentaryEntry:
    """One timestamped narration line."""

    time: str
    seconds: float
    text: str
    excitement_level: Optional[int] = None

    def to_dict(self) -> dict:
        data: dict[str, Any] = {"time": self.time, "text": self.text}
        if self.excitement_level is not None:
            data["excitementLevel"] = self.excitement_level
        return data


# ---------------------------------------------------------------------------
# Tagged parse result
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Ok:
    entries: tuple[CommentaryEntry, ...]


@dataclass(frozen=True)
class PartialOk:
    entries: tuple[CommentaryEntry, ...]
    warnings: tuple[str, ...]


@dataclass(frozen=True)
class Fatal:
    reason: str


ParseResult = Union[Ok, PartialOk, Fatal]


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

def _normalize_time(raw: Any) -> tuple[str, float]:
    if isinstance(raw, bool):
        raise TimecodeError(f"Invalid time {raw!r}")
    if isinstance(raw, (int, float)):
        display = format_timecode(raw)
        return display, float(raw)
    if isinstance(raw, str):
        display = raw.strip()
        return display, parse_timecode(display)
    raise TimecodeError(f"Missing or invalid time {raw!r}")


def normalize_excitement(raw: Any) -> Optional[int]:
    """Coerce an excitement level to an int in range; ``ValueError`` otherwise."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, float) and raw.is_integer():
        raw = int(raw)
    if isinstance(raw, str) and raw.strip().isdigit():
        raw = int(raw.strip())
    if isinstance(raw, int) and EXCITEMENT_MIN <= raw <= EXCITEMENT_MAX:
        return raw
    raise ValueError(f"excitementLevel {raw!r} outside {EXCITEMENT_MIN}-{EXCITEMENT_MAX}")


def normalize_entry(item: Any) -> tuple[CommentaryEntry, list[str]]:
    """
    Validate a single raw entry.

    Returns the entry plus any non-fatal notes (e.g. a dropped excitement
    level).  Raises ``ValueError`` when the entry itself is unusable.
    """
    if not isinstance(item, dict):
        raise ValueError(f"entry is not an object: {item!r}")

    display, seconds = _normalize_time(item.get("time"))

    text = item.get("text")
    if not isinstance(text, str) or not text.strip():
        raise ValueError("entry has no text")
    text = text.replace("\\'", "'").strip()

    notes: list[str] = []
    raw_level = item.get("excitementLevel", item.get("excitement_level"))

    marker = _EXCITEMENT_MARKER_RE.search(text)
    if marker:
        text = text[: marker.start()].strip()
        if raw_level is None:
            raw_level = int(marker.group(1))
    if not text:
        raise ValueError("entry has no text")

    try:
        level = normalize_excitement(raw_level)
    except ValueError as e:
        level = None
        notes.append(str(e))

    return CommentaryEntry(display, seconds, text, level), notes


def normalize_entries(items: Any) -> ParseResult:
    """
    Normalize a raw entry list into a tagged result.

    * not a list                         -> ``Fatal``
    * empty list                         -> ``Ok(())``
    * some entries dropped or adjusted   -> ``PartialOk``
    * every entry dropped                -> ``Fatal``
    """
    if not isinstance(items, list):
        return Fatal(f"Commentary must be a list of entries, got {type(items).__name__}")

    entries: list[CommentaryEntry] = []
    warnings: list[str] = []

    for i, item in enumerate(items):
        try:
            entry, notes = normalize_entry(item)
        except ValueError as e:
            warnings.append(f"Entry {i} dropped: {e}")
            continue
        entries.append(entry)
        warnings.extend(f"Entry {i}: {note}" for note in notes)

    if items and not entries:
        return Fatal(f"No usable commentary entries ({len(items)} rejected)")
    if warnings:
        return PartialOk(tuple(entries), tuple(warnings))
    return Ok(tuple(entries))


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CommentaryStore:
    """
    Immutable commentary for one loaded video.

    Insertion order is narration order.  Timestamps are expected to be
    non-decreasing but are never sorted here; lookups scan in index order.
    """

    entries: tuple[CommentaryEntry, ...] = ()
    video_reference: Optional[str] = None
    duration: Optional[float] = None
    warnings: tuple[str, ...] = field(default=())

    @classmethod
    def from_result(
        cls,
        result: ParseResult,
        video_reference: Optional[str] = None,
        duration: Optional[float] = None,
    ) -> "CommentaryStore":
        if isinstance(result, Fatal):
            raise CommentaryFormatError(result.reason)
        warnings = result.warnings if isinstance(result, PartialOk) else ()
        for warning in warnings:
            logger.warning("Commentary: %s", warning)
        return cls(result.entries, video_reference, duration, warnings)

    @classmethod
    def create(
        cls,
        items: Any,
        video_reference: Optional[str] = None,
        duration: Optional[float] = None,
    ) -> "CommentaryStore":
        """Build a store from raw entries, dropping malformed ones."""
        return cls.from_result(normalize_entries(items), video_reference, duration)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[CommentaryEntry]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> CommentaryEntry:
        return self.entries[index]

    def latest_index_at(self, seconds: float, after: Optional[int] = None) -> Optional[int]:
        """Highest index past *after* whose trigger point is at or before *seconds*."""
        start = 0 if after is None else after + 1
        found = None
        for j in range(start, len(self.entries)):
            if self.entries[j].seconds <= seconds:
                found = j
        return found

    def to_timecode_list(self) -> list[dict]:
        return [entry.to_dict() for entry in self.entries]
