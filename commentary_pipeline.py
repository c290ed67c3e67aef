"""
Commentary Pipeline Orchestrator

FLOW:
1. Validate      - size and duration limits, before any network call
2. Upload        - send the video to the Gemini Files API
3. Process       - wait until Gemini marks the file ACTIVE
4. Generate      - two-stage commentary (initial + optimize, one fallback)
5. Normalize     - build the commentary store, collecting warnings
6. Narrate       - preload ElevenLabs audio for every entry
7. Export        - write key_moments.json

Every public step returns a plain dict; failures come back as
{"error": "..."} so callers (CLI, web server) can show the message as-is.
"""

import logging
import mimetypes
from pathlib import Path
from typing import Optional

import httpx

from clients.elevenlabs_client import ElevenLabsClient
from clients.errors import CommentaryGenerationError, CredentialsError, VideoProcessingError
from clients.gemini_client import GeminiClient
from narration_sync import (
    Fatal,
    NarrationPreloader,
    NarrationSession,
    PacedNarrationPlayer,
    PlaybackSynchronizer,
    PreloadFatalError,
    SimulatedVideo,
    normalize_entries,
)
from narration_sync.config import DOWNLOAD_FILENAME
from settings import Settings
from video_validation import VideoValidationError, validate_video_file

logger = logging.getLogger(__name__)


class CommentaryPipeline:
    """Turns a local video into narrated, timecoded commentary."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        gemini: Optional[GeminiClient] = None,
        elevenlabs: Optional[ElevenLabsClient] = None,
    ):
        self.settings = settings or Settings()
        self.gemini = gemini or GeminiClient(
            api_key=self.settings.gemini_api_key,
            model=self.settings.gemini_model,
            debug=self.settings.debug_mode,
        )
        self.elevenlabs = elevenlabs or ElevenLabsClient(
            api_key=self.settings.eleven_labs_api_key,
            voice_id=self.settings.eleven_labs_voice_id,
            debug=self.settings.debug_mode,
        )

    # ==================== STEPS ====================

    def validate(self, video_path: str, duration: Optional[float] = None) -> dict:
        """Step 1: check the video against the configured limits."""
        try:
            duration = validate_video_file(
                video_path,
                max_size_mb=self.settings.max_video_size_mb,
                max_duration_sec=self.settings.max_video_duration_sec,
                duration=duration,
            )
        except VideoValidationError as e:
            return {"error": str(e)}
        return {"duration": duration}

    async def upload(self, video_path: str) -> dict:
        """Steps 2-3: upload to Gemini and wait for processing."""
        if self.settings.debug_mode:
            name = Path(video_path).name
            return {
                "geminiFile": {
                    "name": f"files/debug-{name}",
                    "uri": f"debug://{name}",
                    "mimeType": mimetypes.guess_type(name)[0] or "video/mp4",
                    "state": "ACTIVE",
                }
            }

        try:
            file_obj = await self.gemini.upload_video(video_path)
            file_obj = await self.gemini.wait_until_active(file_obj["name"])
        except CredentialsError as e:
            return {"error": str(e)}
        except VideoProcessingError as e:
            return {"error": f"Gemini could not process the video: {e}"}
        except httpx.HTTPError as e:
            return {"error": f"Error uploading video to Gemini: {e}"}

        return {"geminiFile": file_obj}

    async def generate(self, file_uri: str, mime_type: str, duration: float) -> dict:
        """Steps 4-5: generate commentary and normalize it.

        Returns:
            ``{"timecodeList", "warnings", "usedFallback"}`` or ``{"error"}``
        """
        try:
            result = await self.gemini.generate_commentary(file_uri, mime_type, duration)
        except (CredentialsError, CommentaryGenerationError) as e:
            return {"error": str(e)}

        parsed = normalize_entries(result["timecodes"])
        if isinstance(parsed, Fatal):
            return {"error": f"Failed to generate commentary: {parsed.reason}"}

        return {
            "timecodeList": [entry.to_dict() for entry in parsed.entries],
            "warnings": list(getattr(parsed, "warnings", ())),
            "usedFallback": result.get("used_fallback", False),
        }

    def build_session(self, duration: Optional[float] = None, player=None) -> NarrationSession:
        """Wire a session to a simulated video and paced narration player."""
        video = SimulatedVideo(duration=duration)
        synchronizer = PlaybackSynchronizer(video, player or PacedNarrationPlayer())
        preloader = NarrationPreloader(self.elevenlabs, voice_id=self.settings.eleven_labs_voice_id)
        return NarrationSession(preloader, synchronizer)

    async def narrate(self, session: NarrationSession) -> dict:
        """Step 6: preload narration for the session's commentary."""
        try:
            resources = await session.prepare_narration()
        except PreloadFatalError as e:
            return {"error": str(e), "narrated": 0}

        if resources is None:
            return {"error": "Narration was superseded by newer commentary", "narrated": 0}

        return {"narrated": sum(1 for r in resources if r is not None), "total": len(resources)}

    # ==================== FULL RUN ====================

    async def run(self, video_path: str, output_dir: Optional[str] = None, narrate: bool = True) -> dict:
        """Run every step for one video and write ``key_moments.json``.

        Args:
            video_path: Local video file
            output_dir: Where to write the export (defaults to the video's folder)
            narrate: Preload narration audio after generating commentary
        """
        print(f"\n{'=' * 60}")
        print(f"🎙️ PLAY-BY-PLAY: {Path(video_path).name}")
        print(f"{'=' * 60}")

        checked = self.validate(video_path)
        if "error" in checked:
            print(f"  ❌ {checked['error']}")
            return checked
        duration = checked["duration"]
        print(f"  ✅ Video OK ({duration:.1f}s)")

        uploaded = await self.upload(video_path)
        if "error" in uploaded:
            print(f"  ❌ {uploaded['error']}")
            return uploaded
        gemini_file = uploaded["geminiFile"]
        print(f"  ✅ Uploaded as {gemini_file.get('name')}")

        generated = await self.generate(gemini_file["uri"], gemini_file.get("mimeType", "video/mp4"), duration)
        if "error" in generated:
            print(f"  ❌ {generated['error']}")
            return generated
        print(f"  ✅ {len(generated['timecodeList'])} key moments")
        for warning in generated["warnings"]:
            print(f"  ⚠️ {warning}")
        if generated["usedFallback"]:
            print("  ⚠️ Optimize pass failed, using initial commentary")

        session = self.build_session(duration)
        session.load_video(video_path, duration)
        session.set_commentary(generated["timecodeList"])

        result = {**generated, "videoPath": video_path, "duration": duration}

        if narrate:
            narration = await self.narrate(session)
            result["narration"] = narration
            if "error" in narration:
                print(f"  ⚠️ {narration['error']}")
            else:
                print(f"  ✅ Narration ready for {narration['narrated']}/{narration['total']} moments")

        out_dir = Path(output_dir) if output_dir else Path(video_path).parent
        result["output"] = str(session.save(out_dir / DOWNLOAD_FILENAME))
        print(f"  💾 {result['output']}")
        return result
