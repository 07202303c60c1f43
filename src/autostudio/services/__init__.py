"""External service integrations."""

from .anthropic import AnthropicClient
from .imagen import ImagenClient, ImageResult, placeholder_image_url
from .speech import SpeechClient
from .assets import decode_data_uri, encode_data_uri, save_asset

__all__ = [
    "AnthropicClient",
    "ImagenClient",
    "ImageResult",
    "placeholder_image_url",
    "SpeechClient",
    "decode_data_uri",
    "encode_data_uri",
    "save_asset",
]
