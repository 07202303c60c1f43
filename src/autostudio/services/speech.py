"""Gemini text-to-speech client via Vertex AI."""

import base64
import logging
import re
from typing import Optional

import requests

from ..config import config
from .assets import encode_data_uri, pcm_to_wav
from .vertex import get_auth_headers, model_url

logger = logging.getLogger(__name__)

_RATE_RE = re.compile(r"rate=(\d+)")


class SpeechClient:
    """Client wrapper for Gemini speech generation."""

    DEFAULT_SAMPLE_RATE = 24000
    DEFAULT_TIMEOUT = 120.0

    def __init__(
        self,
        project_id: Optional[str] = None,
        location: Optional[str] = None,
        model: Optional[str] = None,
        voice: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._project_id = project_id or config.google_cloud_project
        self._location = location or config.google_cloud_location
        self._model = model or config.tts_model
        self._voice = voice or config.tts_voice
        self._timeout = timeout

        if not self._project_id:
            raise ValueError("GOOGLE_CLOUD_PROJECT not set")

    @property
    def model(self) -> str:
        return self._model

    @property
    def voice(self) -> str:
        return self._voice

    def generate_speech(self, text: str) -> Optional[str]:
        """Synthesize ``text`` into a WAV data URI.

        Returns:
            The audio as a data URI, or None for empty text or on any failure.
        """
        if not text or not text.strip():
            return None

        request_body = {
            "contents": [{"role": "user", "parts": [{"text": text}]}],
            "generationConfig": {
                "responseModalities": ["AUDIO"],
                "speechConfig": {
                    "voiceConfig": {
                        "prebuiltVoiceConfig": {"voiceName": self._voice},
                    },
                },
            },
        }

        try:
            url = model_url(self._project_id, self._location, self._model, "generateContent")
            logger.info(f"Synthesizing speech: {text[:50]}...")
            response = requests.post(
                url,
                json=request_body,
                headers=get_auth_headers(),
                timeout=self._timeout,
            )

            if response.status_code != 200:
                logger.error(f"TTS API error: {response.status_code}: {response.text[:500]}")
                return None

            inline = self._extract_inline_data(response.json())
            if not inline or not inline.get("data"):
                logger.error("No audio data in TTS response")
                return None

            return self._to_data_uri(inline.get("mimeType", ""), inline["data"])

        except Exception as e:
            logger.error(f"TTS generation failed: {e}")
            return None

    @staticmethod
    def _extract_inline_data(data: dict) -> Optional[dict]:
        candidates = data.get("candidates") or []
        if not candidates:
            return None
        parts = (candidates[0].get("content") or {}).get("parts") or []
        for part in parts:
            inline = part.get("inlineData")
            if inline:
                return inline
        return None

    def _to_data_uri(self, mime_type: str, b64_data: str) -> str:
        """Convert the returned audio into a playable data URI.

        Gemini returns raw 16-bit PCM (``audio/L16;codec=pcm;rate=24000``),
        which players cannot use directly, so it is wrapped in WAV.
        """
        mime = mime_type.lower()
        if mime.startswith("audio/l16") or "pcm" in mime or not mime:
            match = _RATE_RE.search(mime)
            rate = int(match.group(1)) if match else self.DEFAULT_SAMPLE_RATE
            wav = pcm_to_wav(base64.b64decode(b64_data), sample_rate=rate)
            return encode_data_uri("audio/wav", wav)
        return encode_data_uri(mime.split(";")[0], b64_data)
