"""Configuration management."""

import os
from pydantic import BaseModel, Field
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config(BaseModel):
    """Application configuration."""

    # API Keys
    anthropic_api_key: str = Field(
        default_factory=lambda: os.getenv("ANTHROPIC_API_KEY", ""),
        description="Anthropic API key"
    )
    google_cloud_project: str = Field(
        default_factory=lambda: os.getenv("GOOGLE_CLOUD_PROJECT", ""),
        description="Google Cloud project ID"
    )
    google_cloud_location: str = Field(
        default_factory=lambda: os.getenv("GOOGLE_CLOUD_LOCATION", "us-central1"),
        description="Vertex AI region"
    )

    # Model settings
    default_model: str = Field(
        default_factory=lambda: os.getenv("AUTOSTUDIO_MODEL", "claude-sonnet-4-20250514"),
        description="Claude model used by the script and visual agents"
    )
    imagen_model: str = Field(
        default_factory=lambda: os.getenv("IMAGEN_MODEL", "imagen-3.0-generate-001"),
        description="Imagen model for frame images"
    )
    tts_model: str = Field(
        default_factory=lambda: os.getenv("TTS_MODEL", "gemini-2.5-flash-preview-tts"),
        description="Gemini model for speech synthesis"
    )
    tts_voice: str = Field(
        default_factory=lambda: os.getenv("TTS_VOICE", "Kore"),
        description="Prebuilt voice name"
    )

    # Output settings
    aspect_ratio: str = Field(
        default_factory=lambda: os.getenv("AUTOSTUDIO_ASPECT_RATIO", "9:16"),
        description="Frame image aspect ratio"
    )
    placeholder_image_url: str = Field(
        default_factory=lambda: os.getenv(
            "AUTOSTUDIO_PLACEHOLDER_URL", "https://picsum.photos/seed/{seed}/576/1024"
        ),
        description="Image used when Imagen is unavailable; {seed} is filled in"
    )

    class Config:
        """Pydantic config."""
        frozen = False

    def validate_required(self) -> None:
        """Validate that required credentials are set."""
        if not self.anthropic_api_key:
            raise ValueError("ANTHROPIC_API_KEY not set")

    def validate_google_required(self) -> None:
        """Validate that Google Cloud settings for Imagen and TTS are set.

        Raises:
            ValueError: If any required Google configuration is missing.
        """
        missing: list[str] = []

        if not self.google_cloud_project:
            missing.append("GOOGLE_CLOUD_PROJECT")
        if not self.google_cloud_location:
            missing.append("GOOGLE_CLOUD_LOCATION")

        if missing:
            raise ValueError(
                f"Missing required Google configuration: {', '.join(missing)}. "
                "Set the corresponding environment variables."
            )


# Global config instance
config = Config()
