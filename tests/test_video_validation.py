"""Tests for video_validation — upload limits."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from video_validation import VideoValidationError, probe_duration, validate_video_file


@pytest.fixture
def video(tmp_path):
    path = tmp_path / "clip.mp4"
    path.write_bytes(b"\x00" * 2048)
    return path


class TestValidateVideoFile:
    def test_within_limits(self, video):
        assert validate_video_file(str(video), duration=12.0) == 12.0

    def test_missing_file(self, tmp_path):
        with pytest.raises(VideoValidationError, match="not found"):
            validate_video_file(str(tmp_path / "nope.mp4"), duration=1.0)

    def test_too_large(self, video):
        with pytest.raises(VideoValidationError, match=r"Video file is too large .* Max allowed is 0.001 MB."):
            validate_video_file(str(video), max_size_mb=0.001, duration=1.0)

    def test_too_long(self, video):
        with pytest.raises(VideoValidationError, match="Max allowed is 16 seconds"):
            validate_video_file(str(video), duration=20.0)

    def test_duration_probed_when_unknown(self, video):
        with patch("video_validation.probe_duration", return_value=8.5) as probe:
            assert validate_video_file(str(video)) == 8.5
        probe.assert_called_once_with(str(video))

    def test_unreadable_duration(self, video):
        with patch("video_validation.probe_duration", return_value=None):
            with pytest.raises(VideoValidationError, match="Could not read"):
                validate_video_file(str(video))


class TestProbeDuration:
    def test_parses_ffprobe_output(self):
        result = MagicMock(returncode=0, stdout="12.480000\n")
        with patch("video_validation.subprocess.run", return_value=result) as run:
            assert probe_duration("clip.mp4") == 12.48
        assert run.call_args[0][0][0] == "ffprobe"

    def test_ffprobe_missing(self):
        with patch("video_validation.subprocess.run", side_effect=FileNotFoundError("ffprobe")):
            assert probe_duration("clip.mp4") is None

    def test_ffprobe_timeout(self):
        with patch("video_validation.subprocess.run", side_effect=subprocess.TimeoutExpired("ffprobe", 10)):
            assert probe_duration("clip.mp4") is None

    def test_ffprobe_error_exit(self):
        result = MagicMock(returncode=1, stdout="")
        with patch("video_validation.subprocess.run", return_value=result):
            assert probe_duration("clip.mp4") is None
