"""Google Imagen API client wrapper via Vertex AI."""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import requests

from ..config import config
from .assets import encode_data_uri
from .vertex import get_auth_headers, model_url

logger = logging.getLogger(__name__)

# Appended to every storyboard prompt
FRAME_PROMPT_SUFFIX = "cinematic, 4k, highly detailed, photorealistic"


@dataclass
class ImageResult:
    """Result of an Imagen generation request."""

    prompt: str
    data_uri: Optional[str] = None
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None
    metadata: dict = field(default_factory=dict)


class ImagenClient:
    """Client wrapper for Google Imagen image generation via Vertex AI."""

    DEFAULT_MIME_TYPE = "image/jpeg"
    DEFAULT_TIMEOUT = 120.0

    def __init__(
        self,
        project_id: Optional[str] = None,
        location: Optional[str] = None,
        model: Optional[str] = None,
        aspect_ratio: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the Imagen client.

        Args:
            project_id: Google Cloud project ID.
            location: GCP region for Vertex AI.
            model: Imagen model name.
            aspect_ratio: Default aspect ratio for frame images.
            timeout: HTTP timeout in seconds.
        """
        self._project_id = project_id or config.google_cloud_project
        self._location = location or config.google_cloud_location
        self._model = model or config.imagen_model
        self._aspect_ratio = aspect_ratio or config.aspect_ratio
        self._timeout = timeout

        if not self._project_id:
            raise ValueError("GOOGLE_CLOUD_PROJECT not set")

    @property
    def project_id(self) -> str:
        return self._project_id

    @property
    def model(self) -> str:
        return self._model

    def generate_image(
        self,
        prompt: str,
        aspect_ratio: Optional[str] = None,
        negative_prompt: Optional[str] = None,
    ) -> ImageResult:
        """Generate an image from a text prompt.

        Args:
            prompt: Text description of the image to generate.
            aspect_ratio: Image aspect ratio ('1:1', '16:9', '9:16', '4:3', '3:4').
            negative_prompt: Things to avoid in the image.

        Returns:
            ImageResult with the image as a data URI, or an error message.
        """
        ratio = aspect_ratio or self._aspect_ratio
        result = ImageResult(
            prompt=prompt,
            created_at=datetime.now(),
            metadata={
                "aspect_ratio": ratio,
                "model": self._model,
            },
        )

        try:
            url = model_url(self._project_id, self._location, self._model, "predict")

            request_body = {
                "instances": [
                    {"prompt": prompt}
                ],
                "parameters": {
                    "sampleCount": 1,
                    "aspectRatio": ratio,
                    "outputOptions": {"mimeType": self.DEFAULT_MIME_TYPE},
                },
            }

            if negative_prompt:
                request_body["parameters"]["negativePrompt"] = negative_prompt

            logger.info(f"Generating image with Imagen: {prompt[:50]}...")
            response = requests.post(
                url,
                json=request_body,
                headers=get_auth_headers(),
                timeout=self._timeout,
            )

            if response.status_code != 200:
                error_msg = f"{response.status_code}: {response.text[:500]}"
                logger.error(f"Imagen API error: {error_msg}")
                result.error_message = error_msg
                return result

            data = response.json()

            predictions = data.get("predictions", [])
            if not predictions:
                result.error_message = "No predictions in response"
                return result

            image_data = predictions[0].get("bytesBase64Encoded")
            if not image_data:
                result.error_message = "No image data in response"
                return result

            mime_type = predictions[0].get("mimeType", self.DEFAULT_MIME_TYPE)
            result.data_uri = encode_data_uri(mime_type, image_data)
            return result

        except Exception as e:
            logger.error(f"Image generation failed: {e}")
            result.error_message = str(e)
            return result

    def generate_frame_image(self, prompt: str) -> str:
        """Render a storyboard frame.

        Falls back to a placeholder image URL when Imagen fails, so the
        caller always gets a usable reference.
        """
        full_prompt = f"{prompt}, {FRAME_PROMPT_SUFFIX}, {self._aspect_ratio} aspect ratio"
        result = self.generate_image(full_prompt)
        if result.data_uri:
            return result.data_uri

        logger.warning(
            f"Imagen generation failed ({result.error_message}), using placeholder image"
        )
        return placeholder_image_url()


def placeholder_image_url() -> str:
    """Return a fresh placeholder image URL."""
    return config.placeholder_image_url.format(seed=uuid.uuid4().hex[:12])
