"""Tests for clients.elevenlabs_client — speech synthesis."""

import asyncio
import json

import httpx
import pytest

from clients.elevenlabs_client import ElevenLabsClient
from clients.errors import CredentialsError, SpeechSynthesisError


def _client(handler, **kwargs):
    return ElevenLabsClient(api_key="xi-test", transport=httpx.MockTransport(handler), **kwargs)


class TestSynthesize:
    def test_success(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, content=b"ID3audio", headers={"content-type": "audio/mpeg"})

        result = asyncio.run(_client(handler).synthesize("What a goal!", excitement_level=5))

        assert result == {"audio": b"ID3audio", "mime_type": "audio/mpeg", "source": "elevenlabs"}
        request = seen[0]
        assert request.headers["xi-api-key"] == "xi-test"
        assert request.url.path == f"/v1/text-to-speech/{ElevenLabsClient.DEFAULT_VOICE_ID}"
        body = json.loads(request.content)
        assert body["text"] == "What a goal!"
        assert body["voice_settings"] == ElevenLabsClient.EXCITEMENT_SETTINGS[5]

    def test_voice_override(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, content=b"x")

        asyncio.run(_client(handler, voice_id="voice-a").synthesize("Hi", voice_id="voice-b"))

        assert seen[0].url.path.endswith("/voice-b")

    def test_unauthorized_is_credentials_error(self):
        client = _client(lambda request: httpx.Response(401))
        with pytest.raises(CredentialsError):
            asyncio.run(client.synthesize("Hi"))

    def test_server_error_is_synthesis_error(self):
        client = _client(lambda request: httpx.Response(500))
        with pytest.raises(SpeechSynthesisError, match="500"):
            asyncio.run(client.synthesize("Hi"))

    def test_transport_error_is_synthesis_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(SpeechSynthesisError):
            asyncio.run(_client(handler).synthesize("Hi"))

    def test_missing_key(self, monkeypatch):
        monkeypatch.setenv("ELEVEN_LABS_API_KEY", "ambient-key")
        with pytest.raises(CredentialsError):
            asyncio.run(ElevenLabsClient().synthesize("Hi"))


class TestDebugMode:
    def test_placeholder_audio_without_network(self):
        def handler(request):
            raise AssertionError("network used in debug mode")

        client = ElevenLabsClient(debug=True, transport=httpx.MockTransport(handler))
        result = asyncio.run(client.synthesize("Hi"))

        assert result["source"] == "placeholder"
        assert result["mime_type"] == "audio/wav"
        assert result["audio"].startswith(b"RIFF")


class TestVoiceSettings:
    def test_levels_get_livelier(self):
        calm = ElevenLabsClient.voice_settings(1)
        wild = ElevenLabsClient.voice_settings(5)
        assert wild["stability"] < calm["stability"]
        assert wild["style"] > calm["style"]

    def test_unknown_level_is_neutral(self):
        assert ElevenLabsClient.voice_settings(None) == ElevenLabsClient.EXCITEMENT_SETTINGS[1]

    def test_returns_copy(self):
        ElevenLabsClient.voice_settings(3)["stability"] = 0
        assert ElevenLabsClient.EXCITEMENT_SETTINGS[3]["stability"] == 0.55
