"""Request models for aipic."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_WIDTH = 1024
DEFAULT_HEIGHT = 1024


class ImageGenerationRequest(BaseModel):
    """Request model for a single web image generation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    prompt: str = Field(..., description="English prompt describing the image to generate")
    width: int = Field(DEFAULT_WIDTH, gt=0, description="Image width in pixels")
    height: int = Field(DEFAULT_HEIGHT, gt=0, description="Image height in pixels")
    output_path: Optional[str] = Field(
        None,
        alias="outputPath",
        description="Where to save the image. A unique filename is generated when omitted.",
    )
    api_key: Optional[str] = Field(
        None,
        alias="apiKey",
        description="Provider API key. Falls back to the configured environment variables.",
    )

    def get_size_tuple(self) -> tuple[int, int]:
        """Return the requested (width, height)."""
        return (self.width, self.height)

    def needs_resize(self) -> bool:
        """Whether the requested size differs from the provider's default output."""
        return self.get_size_tuple() != (DEFAULT_WIDTH, DEFAULT_HEIGHT)
