"""Size and duration checks run on a video before anything is uploaded."""

import logging
import subprocess
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

MAX_VIDEO_SIZE_MB = 10
MAX_VIDEO_DURATION_SEC = 16


class VideoValidationError(ValueError):
    """The video is too large, too long, or unreadable."""


def probe_duration(path: str) -> Optional[float]:
    """Return the video's duration in seconds via ffprobe, or None if unknown."""
    try:
        probe = subprocess.run(
            ["ffprobe", "-v", "quiet", "-show_entries",
             "format=duration", "-of",
             "default=noprint_wrappers=1:nokey=1",
             str(path)],
            capture_output=True, text=True, timeout=10,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.warning("ffprobe failed for %s: %s", path, e)
        return None

    if probe.returncode != 0 or not probe.stdout.strip():
        return None
    try:
        return float(probe.stdout.strip())
    except ValueError:
        return None


def validate_video_file(
    path: str,
    max_size_mb: float = MAX_VIDEO_SIZE_MB,
    max_duration_sec: float = MAX_VIDEO_DURATION_SEC,
    duration: Optional[float] = None,
) -> float:
    """Check a local video against the upload limits.

    Args:
        path: Local video file
        max_size_mb: Largest accepted file size
        max_duration_sec: Longest accepted duration
        duration: Known duration (skips ffprobe)

    Returns:
        The video duration in seconds

    Raises:
        VideoValidationError: with a message fit to show the user
    """
    video = Path(path)
    if not video.is_file():
        raise VideoValidationError(f"Video file not found: {video.name}")

    size_mb = video.stat().st_size / (1024 * 1024)
    if size_mb > max_size_mb:
        raise VideoValidationError(
            f"Video file is too large ({size_mb:.2f} MB). Max allowed is {max_size_mb:g} MB."
        )

    if duration is None:
        duration = probe_duration(str(video))
    if duration is None:
        raise VideoValidationError("Could not read the video duration.")

    if duration > max_duration_sec:
        raise VideoValidationError(
            f"Video is too long ({duration:.2f} seconds). Max allowed is {max_duration_sec:g} seconds."
        )

    return duration
