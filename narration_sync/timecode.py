"""
Timecode conversion between ``"mm:ss"`` display strings and seconds.
"""

from __future__ import annotations

import math
import re

_PART_RE = re.compile(r"^\d+(?:\.\d+)?$")


class TimecodeError(ValueError):
    """Raised when a timecode cannot be parsed or formatted."""
    pass


def parse_timecode(display: str) -> float:
    """
    Convert ``"mm:ss"`` or ``"hh:mm:ss"`` into seconds.

    Every part must be a non-negative decimal number; fractional values are
    allowed (``"0:02.5"`` -> 2.5).  Anything else raises ``TimecodeError``
    so callers never seek or schedule on a bad value.
    """
    if not isinstance(display, str):
        raise TimecodeError(f"Timecode must be a string, got {type(display).__name__}")

    parts = [p.strip() for p in display.strip().split(":")]
    if len(parts) not in (2, 3):
        raise TimecodeError(f"Timecode must look like mm:ss or hh:mm:ss: {display!r}")

    for part in parts:
        if not _PART_RE.match(part):
            raise TimecodeError(f"Non-numeric timecode part {part!r} in {display!r}")

    values = [float(p) for p in parts]
    if len(values) == 2:
        minutes, seconds = values
        return minutes * 60 + seconds

    hours, minutes, seconds = values
    return hours * 3600 + minutes * 60 + seconds


def format_timecode(seconds: float) -> str:
    """
    Render seconds as ``"m:ss"``.

    Minutes are not zero-padded and may exceed 59; seconds are floored and
    padded to two digits.
    """
    if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
        raise TimecodeError(f"Seconds must be numeric, got {seconds!r}")
    if not math.isfinite(seconds) or seconds < 0:
        raise TimecodeError(f"Seconds must be a finite non-negative number: {seconds!r}")

    whole = int(math.floor(seconds))
    minutes, secs = divmod(whole, 60)
    return f"{minutes}:{secs:02d}"
