"""ElevenLabs text-to-speech client."""

import base64
import logging
from typing import Optional

import httpx

from .errors import CredentialsError, SpeechSynthesisError

logger = logging.getLogger(__name__)


class ElevenLabsClient:
    """Client for narration synthesis via the ElevenLabs REST API."""

    DEFAULT_VOICE_ID = "JBFqnCBsd6RMkjVDRZzb"

    API_URL = "https://api.elevenlabs.io/v1/text-to-speech/{voice_id}"
    MODEL_ID = "eleven_monolingual_v1"

    # 44-byte silent WAV returned in debug mode so playback never breaks
    SILENT_WAV_BASE64 = "UklGRiQAAABXQVZFZm10IBAAAAABAAEAQB8AAEAfAAABAAgAZGF0YQAAAAA="

    # Calm lines keep a steady read; climactic ones loosen stability and
    # push style so the delivery sounds like a broadcaster.
    EXCITEMENT_SETTINGS = {
        1: {"stability": 0.75, "similarity_boost": 0.75, "style": 0.0},
        2: {"stability": 0.65, "similarity_boost": 0.75, "style": 0.2},
        3: {"stability": 0.55, "similarity_boost": 0.75, "style": 0.4},
        4: {"stability": 0.45, "similarity_boost": 0.8, "style": 0.6},
        5: {"stability": 0.35, "similarity_boost": 0.8, "style": 0.8},
    }

    def __init__(
        self,
        api_key: Optional[str] = None,
        voice_id: Optional[str] = None,
        debug: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.voice_id = voice_id or self.DEFAULT_VOICE_ID
        self.debug = debug
        self._transport = transport

    def _require_api_key(self):
        """Raise error if API key is missing (called before actual API use)."""
        if not self.api_key:
            raise CredentialsError("Missing ElevenLabs API key")

    @classmethod
    def voice_settings(cls, excitement_level: Optional[int] = None) -> dict:
        """Voice settings for an excitement level (1-5); neutral if unknown."""
        return dict(cls.EXCITEMENT_SETTINGS.get(excitement_level, cls.EXCITEMENT_SETTINGS[1]))

    def placeholder_audio(self) -> dict:
        return {
            "audio": base64.b64decode(self.SILENT_WAV_BASE64),
            "mime_type": "audio/wav",
            "source": "placeholder",
        }

    async def synthesize(
        self,
        text: str,
        voice_id: Optional[str] = None,
        excitement_level: Optional[int] = None,
    ) -> dict:
        """Generate narration audio from text.

        Args:
            text: Text to convert to speech
            voice_id: Voice ID to use (uses default if not specified)
            excitement_level: 1-5, shapes the delivery

        Returns:
            Dict with ``audio`` bytes, ``mime_type`` and ``source``

        Raises:
            CredentialsError: API key missing or rejected
            SpeechSynthesisError: any other failure for this text
        """
        if self.debug:
            return self.placeholder_audio()

        self._require_api_key()
        target_voice = voice_id or self.voice_id

        headers = {
            "xi-api-key": self.api_key,
            "Content-Type": "application/json",
            "Accept": "audio/mpeg",
        }

        payload = {
            "text": text,
            "model_id": self.MODEL_ID,
            "voice_settings": self.voice_settings(excitement_level),
        }

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    self.API_URL.format(voice_id=target_voice),
                    headers=headers,
                    json=payload,
                    timeout=60.0,
                )
        except httpx.HTTPError as e:
            raise SpeechSynthesisError(f"Failed to generate speech: {e}") from e

        if response.status_code == 401:
            raise CredentialsError("ElevenLabs rejected the API key")
        if response.status_code >= 400:
            raise SpeechSynthesisError(
                f"Failed to generate speech: {response.status_code} {response.reason_phrase}"
            )

        return {
            "audio": response.content,
            "mime_type": response.headers.get("content-type", "audio/mpeg"),
            "source": "elevenlabs",
        }
