"""API Clients for the Play-by-Play Narrator."""

from .errors import (
    CommentaryGenerationError,
    CredentialsError,
    SpeechSynthesisError,
    VideoProcessingError,
)
from .elevenlabs_client import ElevenLabsClient
from .gemini_client import GeminiClient
from .storage_client import StorageClient
from .commentary_prompts import MODES, DEFAULT_MODE

__all__ = [
    "CommentaryGenerationError",
    "CredentialsError",
    "SpeechSynthesisError",
    "VideoProcessingError",
    "ElevenLabsClient",
    "GeminiClient",
    "StorageClient",
    "MODES",
    "DEFAULT_MODE",
]
