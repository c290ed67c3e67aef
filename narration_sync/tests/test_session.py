"""Tests for narration_sync.session — ownership, staleness, export."""

import asyncio
import json

import pytest

from clients.errors import CredentialsError
from narration_sync.commentary_store import Fatal, Ok, PartialOk
from narration_sync.playback import PacedNarrationPlayer, SimulatedVideo
from narration_sync.preloader import NarrationPreloader, PreloadFatalError
from narration_sync.session import NarrationSession, load_session_file
from narration_sync.synchronizer import PlaybackSynchronizer, SyncState


class EchoSynthesizer:
    def __init__(self, on_call=None, error=None):
        self.on_call = on_call
        self.error = error
        self.calls = 0

    async def synthesize(self, text, voice_id=None, excitement_level=None):
        self.calls += 1
        if self.on_call:
            self.on_call(self.calls)
        await asyncio.sleep(0)
        if self.error:
            raise self.error("nope")
        return {"audio": text.encode(), "mime_type": "audio/mpeg"}


def _session(synth=None):
    sync = PlaybackSynchronizer(SimulatedVideo(duration=10), PacedNarrationPlayer())
    return NarrationSession(NarrationPreloader(synth or EchoSynthesizer()), sync)


TIMECODES = [{"time": "00:00", "text": "A"}, {"time": "00:04", "text": "B"}]


# ---------------------------------------------------------------------------
# Video and commentary
# ---------------------------------------------------------------------------

class TestCommentary:
    def test_load_video_bumps_epoch(self):
        session = _session()
        before = session.epoch
        session.load_video("clip.mp4", 10.0)
        assert session.epoch == before + 1
        assert session.video_reference == "clip.mp4"
        assert session.synchronizer.state is SyncState.IDLE

    def test_set_commentary_loads_synchronizer(self):
        session = _session()
        session.load_video("clip.mp4", 10.0)
        result = session.set_commentary(TIMECODES)
        assert isinstance(result, Ok)
        assert len(session.store) == 2
        assert session.store.video_reference == "clip.mp4"
        assert session.synchronizer.state is SyncState.READY
        assert session.resources == [None, None]

    def test_set_commentary_accepts_parse_result(self):
        session = _session()
        session.load_video("clip.mp4")
        partial = PartialOk((), ("Entry 0 dropped: bad",))
        assert session.set_commentary(partial) is partial
        assert len(session.store) == 0

    def test_fatal_commentary_keeps_previous_store(self):
        session = _session()
        session.load_video("clip.mp4")
        session.set_commentary(TIMECODES)
        store = session.store

        result = session.set_commentary("garbage")

        assert isinstance(result, Fatal)
        assert session.store is store
        assert session.last_error == result.reason


# ---------------------------------------------------------------------------
# Narration
# ---------------------------------------------------------------------------

class TestPrepareNarration:
    def test_resources_installed(self):
        session = _session()
        session.load_video("clip.mp4")
        session.set_commentary(TIMECODES)

        resources = asyncio.run(session.prepare_narration())

        assert [r.text for r in resources] == ["A", "B"]
        assert session.synchronizer.playable_count == 2
        assert session.synchronizer.state is SyncState.READY

    def test_requires_commentary(self):
        session = _session()
        with pytest.raises(ValueError):
            asyncio.run(session.prepare_narration())

    def test_new_video_during_preload_discards_results(self):
        session = None

        def switch_video(count):
            if count == 1:
                session.load_video("other.mp4", 5.0)

        session = _session(EchoSynthesizer(on_call=switch_video))
        session.load_video("clip.mp4")
        session.set_commentary(TIMECODES)

        result = asyncio.run(session.prepare_narration())

        assert result is None
        assert session.video_reference == "other.mp4"
        assert session.store is None
        assert session.resources == []
        assert session.synchronizer.state is SyncState.IDLE

    def test_credentials_failure_leaves_playback_without_narration(self):
        session = _session(EchoSynthesizer(error=CredentialsError))
        session.load_video("clip.mp4")
        session.set_commentary(TIMECODES)

        with pytest.raises(PreloadFatalError):
            asyncio.run(session.prepare_narration())

        assert "Failed to load TTS audio" in session.last_error
        assert session.synchronizer.state is SyncState.READY
        assert session.synchronizer.playable_count == 0


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

class TestExport:
    def test_export_without_commentary(self):
        with pytest.raises(ValueError, match="No key moments to download."):
            _session().export()

    def test_export_document(self):
        session = _session()
        session.load_video("match.mp4", 6.0)
        session.set_commentary(TIMECODES)
        assert session.export() == {"videoPath": "match.mp4", "timecodeList": TIMECODES}

    def test_save_then_load(self, tmp_path):
        session = _session()
        session.load_video("match.mp4", 6.0)
        session.set_commentary(TIMECODES)

        path = session.save(tmp_path / "key_moments.json")

        assert json.loads(path.read_text()) == {"videoPath": "match.mp4", "timecodeList": TIMECODES}
        video_path, result = load_session_file(path)
        assert video_path == "match.mp4"
        assert [e.to_dict() for e in result.entries] == TIMECODES

    def test_load_non_object_file(self, tmp_path):
        path = tmp_path / "key_moments.json"
        path.write_text("[1, 2]")
        video_path, result = load_session_file(path)
        assert video_path is None
        assert isinstance(result, Fatal)
