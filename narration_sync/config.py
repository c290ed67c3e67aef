"""
Configuration constants for narration sync.

Playback cadence, speech-duration estimates, and commentary limits used
across all narration_sync submodules.
"""

# ---------------------------------------------------------------------------
# Playback cadence (seconds)
# ---------------------------------------------------------------------------
TIME_UPDATE_INTERVAL: float = 0.25
"""How often the playback driver reports the video position (browsers fire
``timeupdate`` roughly four times a second)."""

# ---------------------------------------------------------------------------
# Narration duration estimate
# ---------------------------------------------------------------------------
WORDS_PER_MINUTE: float = 173
"""Speaking rate measured on ElevenLabs output."""

MIN_NARRATION_SECONDS: float = 1.0
MAX_NARRATION_SECONDS: float = 20.0

# ---------------------------------------------------------------------------
# Commentary entries
# ---------------------------------------------------------------------------
EXCITEMENT_MIN: int = 1
EXCITEMENT_MAX: int = 5

EXCITEMENT_MARKER_PATTERN: str = r"\s*\(\s*Excitement Level:\s*(\d)\s*\)\s*$"
"""Some model replies append ``(Excitement Level: N)`` to the spoken text."""

# ---------------------------------------------------------------------------
# Session export
# ---------------------------------------------------------------------------
DOWNLOAD_FILENAME: str = "key_moments.json"
