"""
narration_sync — timecode-synchronized commentary narration.

High-level API consumed by the orchestrator and the replay CLI::

    from narration_sync import (
        NarrationSession, NarrationPreloader, PlaybackSynchronizer,
        SimulatedVideo, PacedNarrationPlayer, run_time_updates,
    )

    video   = SimulatedVideo(duration=6.0)
    sync    = PlaybackSynchronizer(video, PacedNarrationPlayer())
    session = NarrationSession(NarrationPreloader(tts_client), sync)

    session.load_video("clip.mp4", duration=6.0)
    session.set_commentary([{"time": "00:00", "text": "And they're off!"}])
    await session.prepare_narration()

    sync.start()
    await run_time_updates(sync, video)
"""

from .timecode import TimecodeError, parse_timecode, format_timecode
from .commentary_store import (
    CommentaryEntry,
    CommentaryFormatError,
    CommentaryStore,
    Fatal,
    Ok,
    ParseResult,
    PartialOk,
    normalize_entries,
)
from .response_parser import extract_timecodes, parse_commentary
from .preloader import (
    NarrationPreloader,
    NarrationResource,
    PreloadFatalError,
    estimate_speech_duration,
)
from .playback import (
    NarrationPlayer,
    PacedNarrationPlayer,
    SimulatedVideo,
    VideoSource,
    run_time_updates,
)
from .synchronizer import (
    PlaybackCursor,
    PlaybackSynchronizer,
    SynchronizerStateError,
    SyncState,
)
from .session import NarrationSession, load_session_file

__all__ = [
    "TimecodeError",
    "parse_timecode",
    "format_timecode",
    "CommentaryEntry",
    "CommentaryFormatError",
    "CommentaryStore",
    "Fatal",
    "Ok",
    "ParseResult",
    "PartialOk",
    "normalize_entries",
    "extract_timecodes",
    "parse_commentary",
    "NarrationPreloader",
    "NarrationResource",
    "PreloadFatalError",
    "estimate_speech_duration",
    "NarrationPlayer",
    "PacedNarrationPlayer",
    "SimulatedVideo",
    "VideoSource",
    "run_time_updates",
    "PlaybackCursor",
    "PlaybackSynchronizer",
    "SynchronizerStateError",
    "SyncState",
    "NarrationSession",
    "load_session_file",
]
