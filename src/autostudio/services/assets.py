"""Helpers for generated asset references (data URIs and URLs)."""

import base64
import io
import logging
import re
import wave
from pathlib import Path
from typing import Tuple, Union

import requests

logger = logging.getLogger(__name__)

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[^;,]+)(?P<params>(;[^;,]+)*);base64,(?P<data>.*)$", re.DOTALL)

EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "audio/wav": ".wav",
    "audio/mpeg": ".mp3",
    "audio/mp3": ".mp3",
}


def encode_data_uri(mime_type: str, data: Union[bytes, str]) -> str:
    """Build a base64 data URI. ``data`` may already be base64 text."""
    if isinstance(data, bytes):
        data = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{data}"


def decode_data_uri(uri: str) -> Tuple[str, bytes]:
    """Split a base64 data URI into its mime type and raw bytes.

    Raises:
        ValueError: If ``uri`` is not a base64 data URI.
    """
    match = _DATA_URI_RE.match(uri)
    if not match:
        raise ValueError("Not a base64 data URI")
    return match.group("mime"), base64.b64decode(match.group("data"))


def extension_for(mime_type: str) -> str:
    """Return a file extension for a mime type, ``.bin`` when unknown."""
    return EXTENSIONS.get(mime_type.lower(), ".bin")


def pcm_to_wav(
    pcm: bytes,
    sample_rate: int = 24000,
    channels: int = 1,
    sample_width: int = 2,
) -> bytes:
    """Wrap raw little-endian PCM samples in a WAV container."""
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav:
        wav.setnchannels(channels)
        wav.setsampwidth(sample_width)
        wav.setframerate(sample_rate)
        wav.writeframes(pcm)
    return buffer.getvalue()


def save_asset(reference: str, output_path: Path, timeout: float = 60.0) -> Path:
    """Write an asset reference to disk.

    Data URIs are decoded; http(s) references are downloaded. When
    ``output_path`` has no suffix one is derived from the mime type.

    Returns:
        The path written.
    """
    if reference.startswith("data:"):
        mime_type, content = decode_data_uri(reference)
    elif reference.startswith(("http://", "https://")):
        response = requests.get(reference, timeout=timeout)
        response.raise_for_status()
        mime_type = response.headers.get("Content-Type", "").split(";")[0].strip()
        content = response.content
    else:
        raise ValueError(f"Unsupported asset reference: {reference[:40]}")

    if not output_path.suffix:
        output_path = output_path.with_suffix(extension_for(mime_type))

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "wb") as f:
        f.write(content)

    logger.info(f"Saved asset to {output_path}")
    return output_path
