"""Web API for the Play-by-Play Narrator.

Run with: python web_server.py
The browser client unlocks with the site password, uploads a video, asks for
commentary, then fetches narration audio per key moment.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

from flask import Flask, Response, jsonify, request, send_from_directory, session
from werkzeug.utils import secure_filename

from clients.errors import CredentialsError, SpeechSynthesisError
from clients.storage_client import StorageClient
from commentary_pipeline import CommentaryPipeline
from narration_sync import Fatal, normalize_entries
from narration_sync.commentary_store import normalize_excitement
from narration_sync.config import DOWNLOAD_FILENAME
from settings import Settings

logger = logging.getLogger(__name__)

# Routes reachable before the password gate is passed
OPEN_API_ROUTES = {"/api/unlock"}

# Path prefixes that sit behind the password gate
GATED_PREFIXES = ("/api/", "/uploads/")


def run_async(coro):
    """Run async function in sync context."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def create_app(
    settings: Optional[Settings] = None,
    pipeline: Optional[CommentaryPipeline] = None,
    storage: Optional[StorageClient] = None,
) -> Flask:
    """Build the Flask app with its clients wired in."""
    settings = settings or Settings.from_env()
    pipeline = pipeline or CommentaryPipeline(settings)
    storage = storage or StorageClient(
        bucket_name=settings.gcs_bucket_name,
        service_account_key=settings.gcp_service_account_key,
    )
    upload_dir = Path(settings.upload_dir).resolve()

    app = Flask(__name__)
    app.secret_key = settings.flask_secret_key

    @app.before_request
    def require_unlock():
        if request.path.startswith(GATED_PREFIXES) and request.path not in OPEN_API_ROUTES:
            if not session.get("unlocked"):
                return jsonify({"error": "Site is locked. Enter the password first."}), 401
        return None

    @app.route("/api/unlock", methods=["POST"])
    def unlock():
        data = request.get_json(silent=True) or {}
        if data.get("password") != settings.site_password:
            return jsonify({"error": "Incorrect password"}), 401
        session["unlocked"] = True
        return jsonify({"success": True})

    @app.route("/api/gcs-upload-url", methods=["POST"])
    def gcs_upload_url():
        data = request.get_json(silent=True) or {}
        filename = data.get("filename")
        content_type = data.get("contentType")
        if not filename or not content_type:
            return jsonify({"error": "Missing filename or contentType"}), 400

        try:
            url = storage.create_upload_url(filename, content_type)
            return jsonify({"url": url})
        except Exception as e:
            logger.error("Error generating signed URL: %s", e)
            return jsonify({"error": "Failed to generate signed URL"}), 500

    @app.route("/api/upload", methods=["POST"])
    def upload():
        video = request.files.get("video")
        if video is None or not video.filename:
            return jsonify({"error": "No video file provided"}), 400

        upload_dir.mkdir(parents=True, exist_ok=True)
        file_name = secure_filename(video.filename)
        path = upload_dir / file_name
        video.save(str(path))

        checked = pipeline.validate(str(path))
        if "error" in checked:
            path.unlink(missing_ok=True)
            return jsonify(checked), 400

        uploaded = run_async(pipeline.upload(str(path)))
        if "error" in uploaded:
            return jsonify(uploaded), 500

        return jsonify({
            "geminiFile": uploaded["geminiFile"],
            "fileName": file_name,
            "publicUrl": f"/uploads/{file_name}",
            "duration": checked["duration"],
        })

    @app.route("/uploads/<path:filename>", methods=["GET"])
    def uploaded_file(filename: str):
        return send_from_directory(upload_dir, filename)

    @app.route("/api/progress", methods=["POST"])
    def progress():
        data = request.get_json(silent=True) or {}
        file_id = data.get("fileId")
        if not file_id:
            return jsonify({"error": "Missing fileId"}), 400
        if settings.debug_mode:
            return jsonify({"progress": {"state": "ACTIVE"}})

        try:
            state = run_async(pipeline.gemini.get_file_state(file_id))
        except Exception as e:
            logger.error("Error checking progress for %s: %s", file_id, e)
            return jsonify({"error": f"Error checking progress: {e}"}), 500
        return jsonify({"progress": {"state": state}})

    @app.route("/api/commentary", methods=["POST"])
    def commentary():
        data = request.get_json(silent=True) or {}
        file_uri = data.get("fileUri")
        if not file_uri:
            return jsonify({"error": "Missing fileUri"}), 400
        try:
            duration = float(data.get("duration"))
        except (TypeError, ValueError):
            return jsonify({"error": "Missing or invalid duration"}), 400

        result = run_async(pipeline.generate(file_uri, data.get("mimeType", "video/mp4"), duration))
        if "error" in result:
            return jsonify(result), 500
        return jsonify(result)

    @app.route("/api/narration", methods=["POST"])
    def narration():
        data = request.get_json(silent=True) or {}
        text = data.get("text")
        if not text:
            return jsonify({"error": "Missing text"}), 400

        try:
            excitement_level = normalize_excitement(data.get("excitementLevel"))
        except ValueError as e:
            logger.warning("Ignoring %s", e)
            excitement_level = None

        try:
            audio = run_async(pipeline.elevenlabs.synthesize(text, excitement_level=excitement_level))
        except CredentialsError as e:
            return jsonify({"error": f"Failed to load TTS audio: {e}"}), 500
        except SpeechSynthesisError as e:
            return jsonify({"error": str(e)}), 502

        return Response(audio["audio"], mimetype=audio["mime_type"])

    @app.route("/api/key-moments", methods=["POST"])
    def key_moments():
        data = request.get_json(silent=True) or {}
        parsed = normalize_entries(data.get("timecodeList"))
        if isinstance(parsed, Fatal):
            return jsonify({"error": parsed.reason}), 400

        document = {
            "videoPath": data.get("videoPath"),
            "timecodeList": [entry.to_dict() for entry in parsed.entries],
        }
        return Response(
            json.dumps(document, indent=2, ensure_ascii=False),
            mimetype="application/json",
            headers={"Content-Disposition": f"attachment; filename={DOWNLOAD_FILENAME}"},
        )

    @app.route("/health", methods=["GET"])
    def health():
        """Health check endpoint."""
        return jsonify({"status": "ok"})

    return app


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
    app = create_app(Settings.from_env())
    print("Starting Play-by-Play server on port 5050...")
    print("Endpoints:")
    print("  POST /api/unlock")
    print("  POST /api/gcs-upload-url")
    print("  POST /api/upload")
    print("  POST /api/progress")
    print("  POST /api/commentary")
    print("  POST /api/narration")
    print("  POST /api/key-moments")
    print("  GET  /health")
    app.run(host="0.0.0.0", port=5050, debug=True)
