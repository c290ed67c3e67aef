"""Tests for settings — environment and .env loading."""

from pathlib import Path

import pytest

from settings import Settings

ENV_VARS = [
    "GEMINI_API_KEY", "GEMINI_MODEL", "ELEVEN_LABS_API_KEY", "ELEVEN_LABS_VOICE_ID",
    "GCP_SERVICE_ACCOUNT_KEY", "GCS_BUCKET_NAME", "SITE_PASSWORD",
    "FLASK_SECRET_KEY", "DEBUG_MODE", "MAX_VIDEO_SIZE_MB",
    "MAX_VIDEO_DURATION_SEC", "UPLOAD_DIR",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return tmp_path / "missing.env"


class TestFromEnv:
    def test_defaults(self, clean_env):
        settings = Settings.from_env(str(clean_env))
        assert settings.site_password == "demo"
        assert settings.debug_mode is False
        assert settings.max_video_size_mb == 10
        assert settings.max_video_duration_sec == 16
        assert settings.upload_dir == Path("uploads")

    def test_environment_values(self, clean_env, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "g-key")
        monkeypatch.setenv("GEMINI_MODEL", "gemini-test")
        monkeypatch.setenv("DEBUG_MODE", "true")
        monkeypatch.setenv("MAX_VIDEO_DURATION_SEC", "30")
        settings = Settings.from_env(str(clean_env))
        assert settings.gemini_api_key == "g-key"
        assert settings.gemini_model == "gemini-test"
        assert settings.debug_mode is True
        assert settings.max_video_duration_sec == 30.0

    def test_dotenv_file(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("SITE_PASSWORD=from-file\nELEVEN_LABS_VOICE_ID=voice-9\n")
        settings = Settings.from_env(str(env_file))
        assert settings.site_password == "from-file"
        assert settings.eleven_labs_voice_id == "voice-9"

    def test_bad_number(self, clean_env, monkeypatch):
        monkeypatch.setenv("MAX_VIDEO_SIZE_MB", "ten")
        with pytest.raises(ValueError, match="MAX_VIDEO_SIZE_MB"):
            Settings.from_env(str(clean_env))
