"""Google Gemini API client for video upload and commentary generation."""

import asyncio
import logging
import mimetypes
from pathlib import Path
from typing import Optional

import httpx

from narration_sync.commentary_store import CommentaryFormatError, Fatal, normalize_entries
from narration_sync.response_parser import extract_timecodes

from .commentary_prompts import (
    DEBUG_TIMECODES,
    DEFAULT_MODE,
    FILTER_INSTRUCTION,
    FUNCTION_DECLARATIONS,
    SYSTEM_INSTRUCTION,
    build_initial_prompt,
    build_optimize_prompt,
)
from .errors import CommentaryGenerationError, CredentialsError, VideoProcessingError

logger = logging.getLogger(__name__)


class GeminiClient:
    """Client for Google Gemini API (REST-based, no SDK dependency)."""

    BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
    UPLOAD_URL = "https://generativelanguage.googleapis.com/upload/v1beta/files"
    DEFAULT_MODEL = "gemini-2.0-flash"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        debug: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.model = model or self.DEFAULT_MODEL
        self.debug = debug
        self._transport = transport
        # Don't raise here - debug mode and replay never touch the API
        if not self.api_key and not debug:
            logger.info("No Gemini API key - commentary generation will fail until one is configured")

    def _require_api_key(self):
        """Raise error if API key is missing (called before actual API use)."""
        if not self.api_key:
            raise CredentialsError("Missing Gemini API key")

    def _http(self, timeout: float = 60.0) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=timeout)

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.status_code in (401, 403):
            raise CredentialsError(f"Gemini rejected the API key ({response.status_code})")
        response.raise_for_status()

    # ==================== FILES ====================

    async def upload_video(
        self,
        path: str,
        mime_type: Optional[str] = None,
        display_name: Optional[str] = None,
    ) -> dict:
        """Upload a local video to the Gemini Files API.

        Uses the resumable protocol: one request to open the session, one to
        send the bytes and finalize.

        Args:
            path: Local video file
            mime_type: Video MIME type (guessed from the extension if omitted)
            display_name: Name shown in the Files API (defaults to the filename)

        Returns:
            Gemini file object with ``name``, ``uri``, ``mimeType`` and ``state``
        """
        self._require_api_key()

        video = Path(path)
        data = video.read_bytes()
        mime_type = mime_type or mimetypes.guess_type(video.name)[0] or "application/octet-stream"

        start_headers = {
            "X-Goog-Upload-Protocol": "resumable",
            "X-Goog-Upload-Command": "start",
            "X-Goog-Upload-Header-Content-Length": str(len(data)),
            "X-Goog-Upload-Header-Content-Type": mime_type,
            "Content-Type": "application/json",
        }

        async with self._http(timeout=300.0) as client:
            response = await client.post(
                self.UPLOAD_URL,
                params={"key": self.api_key},
                headers=start_headers,
                json={"file": {"display_name": display_name or video.name}},
            )
            self._raise_for_status(response)

            upload_url = response.headers.get("x-goog-upload-url")
            if not upload_url:
                raise VideoProcessingError("Gemini upload session did not return an upload URL")

            response = await client.post(
                upload_url,
                headers={
                    "X-Goog-Upload-Offset": "0",
                    "X-Goog-Upload-Command": "upload, finalize",
                },
                content=data,
            )
            self._raise_for_status(response)

        file_obj = response.json()["file"]
        logger.info("Uploaded %s to Gemini as %s", video.name, file_obj.get("name"))
        return file_obj

    async def get_file(self, name: str) -> dict:
        """Fetch a Files API object (``name`` looks like ``files/abc123``)."""
        self._require_api_key()
        async with self._http(timeout=30.0) as client:
            response = await client.get(f"{self.BASE_URL}/{name}", params={"key": self.api_key})
            self._raise_for_status(response)
        return response.json()

    async def get_file_state(self, name: str) -> str:
        """PROCESSING, ACTIVE or FAILED."""
        data = await self.get_file(name)
        return data.get("state", "STATE_UNSPECIFIED")

    async def wait_until_active(
        self,
        name: str,
        max_attempts: int = 30,
        poll_interval: float = 2.0,
    ) -> dict:
        """Poll until Gemini finishes processing an uploaded video.

        Raises:
            VideoProcessingError: the file FAILED or never became ACTIVE
        """
        for _ in range(max_attempts):
            data = await self.get_file(name)
            state = data.get("state")

            if state == "ACTIVE":
                return data
            elif state == "FAILED":
                raise VideoProcessingError(f"Gemini failed to process {name}")

            await asyncio.sleep(poll_interval)

        raise VideoProcessingError(f"{name} still not ACTIVE after {max_attempts} checks")

    # ==================== COMMENTARY ====================

    async def _generate_content(self, system_instruction: str, parts: list) -> dict:
        url = f"{self.BASE_URL}/models/{self.model}:generateContent"
        payload = {
            "systemInstruction": {"parts": [{"text": system_instruction}]},
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": {"temperature": 0.7},
            "tools": [{"functionDeclarations": FUNCTION_DECLARATIONS}],
        }

        async with self._http(timeout=120.0) as client:
            response = await client.post(url, params={"key": self.api_key}, json=payload)
            self._raise_for_status(response)

        return response.json()

    async def generate_commentary(
        self,
        file_uri: str,
        mime_type: str,
        duration: float,
        mode: str = DEFAULT_MODE,
    ) -> dict:
        """Generate timestamped play-by-play commentary for an uploaded video.

        Two passes: the first watches the video and proposes moments, the
        second tightens timing and assigns excitement levels.  If the second
        pass fails, the first pass's timecodes are returned instead.

        Args:
            file_uri: Gemini file URI from ``upload_video``
            mime_type: The video's MIME type
            duration: Video length in seconds
            mode: Key into ``MODES``

        Returns:
            Dict with ``timecodes`` (raw entry list), ``initial_timecodes``
            and ``used_fallback``

        Raises:
            CredentialsError: API key missing or rejected
            CommentaryGenerationError: the first pass produced nothing usable
        """
        if self.debug:
            logger.info("Debug mode: returning fixed commentary")
            timecodes = [dict(t) for t in DEBUG_TIMECODES]
            return {"timecodes": timecodes, "initial_timecodes": timecodes, "used_fallback": False}

        self._require_api_key()

        try:
            initial_response = await self._generate_content(
                SYSTEM_INSTRUCTION,
                [
                    {"text": build_initial_prompt(duration, mode)},
                    {"fileData": {"mimeType": mime_type, "fileUri": file_uri}},
                ],
            )
            initial = extract_timecodes(initial_response)
        except httpx.HTTPStatusError as e:
            raise CommentaryGenerationError(f"Gemini API error: {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise CommentaryGenerationError(f"Gemini request failed: {e}") from e
        except CommentaryFormatError as e:
            raise CommentaryGenerationError(f"Failed to extract initial timecodes: {e}") from e

        logger.info("Initial pass produced %d timecodes", len(initial))

        try:
            optimize_response = await self._generate_content(
                FILTER_INSTRUCTION,
                [{"text": build_optimize_prompt(initial, duration)}],
            )
            optimized = extract_timecodes(optimize_response)
            check = normalize_entries(optimized)
            if isinstance(check, Fatal):
                raise CommentaryFormatError(check.reason)
        except (httpx.HTTPError, CommentaryFormatError) as e:
            logger.warning("Optimize pass failed (%s); keeping initial commentary", e)
            return {"timecodes": initial, "initial_timecodes": initial, "used_fallback": True}

        logger.info("Optimized pass produced %d timecodes", len(optimized))
        return {"timecodes": optimized, "initial_timecodes": initial, "used_fallback": False}
