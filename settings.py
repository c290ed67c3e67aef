"""Runtime settings loaded once from the environment / .env file."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}")


@dataclass
class Settings:
    gemini_api_key: Optional[str] = None
    gemini_model: Optional[str] = None
    eleven_labs_api_key: Optional[str] = None
    eleven_labs_voice_id: Optional[str] = None
    gcp_service_account_key: Optional[str] = None
    gcs_bucket_name: Optional[str] = None
    site_password: str = "demo"
    flask_secret_key: str = "dev-secret-key"
    debug_mode: bool = False
    max_video_size_mb: float = 10
    max_video_duration_sec: float = 16
    upload_dir: Path = Path("uploads")

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "Settings":
        """Build settings from environment variables (after loading .env)."""
        load_dotenv(dotenv_path)
        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY"),
            gemini_model=os.getenv("GEMINI_MODEL"),
            eleven_labs_api_key=os.getenv("ELEVEN_LABS_API_KEY"),
            eleven_labs_voice_id=os.getenv("ELEVEN_LABS_VOICE_ID"),
            gcp_service_account_key=os.getenv("GCP_SERVICE_ACCOUNT_KEY"),
            gcs_bucket_name=os.getenv("GCS_BUCKET_NAME"),
            site_password=os.getenv("SITE_PASSWORD", "demo"),
            flask_secret_key=os.getenv("FLASK_SECRET_KEY", "dev-secret-key"),
            debug_mode=_env_bool("DEBUG_MODE"),
            max_video_size_mb=_env_float("MAX_VIDEO_SIZE_MB", 10),
            max_video_duration_sec=_env_float("MAX_VIDEO_DURATION_SEC", 16),
            upload_dir=Path(os.getenv("UPLOAD_DIR", "uploads")),
        )
