"""Tests for the Imagen, speech and asset helpers."""

import base64
import io
import wave
from unittest.mock import MagicMock, patch

import pytest
import requests

from autostudio.services import ImagenClient, SpeechClient, decode_data_uri, save_asset
from autostudio.services.assets import encode_data_uri, pcm_to_wav


def _response(status_code=200, payload=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload or {}
    response.text = text
    return response


@pytest.fixture
def no_auth():
    with patch("autostudio.services.imagen.get_auth_headers", return_value={}), \
            patch("autostudio.services.speech.get_auth_headers", return_value={}):
        yield


class TestImagenClient:

    def test_requires_project(self, monkeypatch):
        from autostudio.config import config

        monkeypatch.setattr(config, "google_cloud_project", "")
        with pytest.raises(ValueError):
            ImagenClient()

    def test_frame_image_as_data_uri(self, no_auth):
        image = base64.b64encode(b"jpeg-bytes").decode()
        payload = {"predictions": [{"bytesBase64Encoded": image, "mimeType": "image/jpeg"}]}
        client = ImagenClient(project_id="demo", location="us-central1", aspect_ratio="9:16")

        with patch("autostudio.services.imagen.requests.post", return_value=_response(payload=payload)) as post:
            reference = client.generate_frame_image("robot on a rooftop")

        assert reference == f"data:image/jpeg;base64,{image}"
        url = post.call_args.args[0]
        assert "projects/demo/locations/us-central1" in url
        assert url.endswith(":predict")
        body = post.call_args.kwargs["json"]
        assert body["instances"][0]["prompt"].startswith("robot on a rooftop, cinematic")
        assert body["parameters"]["aspectRatio"] == "9:16"

    @pytest.mark.parametrize("response", [
        _response(status_code=429, text="quota"),
        _response(payload={"predictions": []}),
        _response(payload={"predictions": [{}]}),
    ])
    def test_frame_image_falls_back_to_placeholder(self, no_auth, response):
        client = ImagenClient(project_id="demo")

        with patch("autostudio.services.imagen.requests.post", return_value=response):
            reference = client.generate_frame_image("robot")

        assert reference.startswith("https://picsum.photos/seed/")

    def test_transport_error_falls_back(self, no_auth):
        client = ImagenClient(project_id="demo")

        with patch(
            "autostudio.services.imagen.requests.post",
            side_effect=requests.ConnectionError("offline"),
        ):
            result = client.generate_image("robot")
            reference = client.generate_frame_image("robot")

        assert result.data_uri is None
        assert "offline" in result.error_message
        assert reference.startswith("https://picsum.photos/seed/")


class TestSpeechClient:

    def test_empty_text_skips_request(self, no_auth):
        client = SpeechClient(project_id="demo")
        with patch("autostudio.services.speech.requests.post") as post:
            assert client.generate_speech("") is None
            assert client.generate_speech("   ") is None
        post.assert_not_called()

    def test_pcm_is_wrapped_in_wav(self, no_auth):
        pcm = b"\x00\x01" * 240
        payload = {
            "candidates": [{
                "content": {"parts": [{"inlineData": {
                    "mimeType": "audio/L16;codec=pcm;rate=24000",
                    "data": base64.b64encode(pcm).decode(),
                }}]},
            }],
        }
        client = SpeechClient(project_id="demo", voice="Kore")

        with patch("autostudio.services.speech.requests.post", return_value=_response(payload=payload)) as post:
            reference = client.generate_speech("Target acquired.")

        mime, data = decode_data_uri(reference)
        assert mime == "audio/wav"
        with wave.open(io.BytesIO(data)) as wav:
            assert wav.getframerate() == 24000
            assert wav.readframes(wav.getnframes()) == pcm

        body = post.call_args.kwargs["json"]
        assert body["contents"][0]["parts"][0]["text"] == "Target acquired."
        voice = body["generationConfig"]["speechConfig"]["voiceConfig"]["prebuiltVoiceConfig"]
        assert voice == {"voiceName": "Kore"}

    @pytest.mark.parametrize("response", [
        _response(status_code=500, text="internal"),
        _response(payload={"candidates": []}),
        _response(payload={"candidates": [{"content": {"parts": [{"text": "no audio"}]}}]}),
    ])
    def test_failures_return_none(self, no_auth, response):
        client = SpeechClient(project_id="demo")
        with patch("autostudio.services.speech.requests.post", return_value=response):
            assert client.generate_speech("hello") is None

    def test_transport_error_returns_none(self, no_auth):
        client = SpeechClient(project_id="demo")
        with patch(
            "autostudio.services.speech.requests.post",
            side_effect=requests.Timeout("slow"),
        ):
            assert client.generate_speech("hello") is None


class TestAssets:

    def test_decode_data_uri(self):
        mime, data = decode_data_uri(encode_data_uri("image/png", b"\x89PNG"))
        assert mime == "image/png"
        assert data == b"\x89PNG"

    def test_decode_rejects_other_references(self):
        with pytest.raises(ValueError):
            decode_data_uri("https://example.com/a.png")

    def test_pcm_to_wav_header(self):
        wav = pcm_to_wav(b"\x00\x00" * 10, sample_rate=16000)
        assert wav[:4] == b"RIFF"
        assert wav[8:12] == b"WAVE"

    def test_save_data_uri_adds_extension(self, tmp_path):
        path = save_asset(encode_data_uri("image/jpeg", b"jpeg"), tmp_path / "out" / "scene_01_image")

        assert path == tmp_path / "out" / "scene_01_image.jpg"
        assert path.read_bytes() == b"jpeg"

    def test_save_downloads_urls(self, tmp_path):
        response = MagicMock()
        response.headers = {"Content-Type": "image/jpeg"}
        response.content = b"remote"

        with patch("autostudio.services.assets.requests.get", return_value=response) as get:
            path = save_asset("https://picsum.photos/seed/abc/576/1024", tmp_path / "frame")

        get.assert_called_once()
        assert path.suffix == ".jpg"
        assert path.read_bytes() == b"remote"

    def test_save_rejects_unknown_reference(self, tmp_path):
        with pytest.raises(ValueError):
            save_asset("ftp://nope", tmp_path / "x")
