"""Image generation response models."""

from typing import Optional

from pydantic import BaseModel, Field, model_validator

from aipic.models.metrics import GenerationMetrics
from aipic.models.responses import GenerationError


class GenerationResult(BaseModel):
    """A generated image saved to local storage."""

    saved_path: str = Field(..., description="Absolute path the image was written to")
    width: int = Field(..., ge=1, description="Image width in pixels")
    height: int = Field(..., ge=1, description="Image height in pixels")
    image_bytes: bytes = Field(..., repr=False, description="Final encoded image bytes")
    mime_type: str = Field("image/png", description="MIME type of image_bytes")
    prompt: str = Field(..., description="Prompt the image was generated from")
    provider: Optional[str] = Field(None, description="Provider that produced the image")

    @property
    def dimensions(self) -> str:
        return f"{self.width}x{self.height}"


class ImageGenerationResponse(BaseModel):
    """Response model for image generation."""

    success: bool = Field(..., description="Whether generation succeeded")
    result: Optional[GenerationResult] = Field(None, description="Generated image (present if success=True)")
    metrics: Optional[GenerationMetrics] = Field(None, description="Timing and provider details")
    error: Optional[GenerationError] = Field(None, description="Error details if success=False")

    @model_validator(mode="after")
    def validate_success_state(self):
        """Ensure success state is consistent."""
        if self.success is True:
            if self.result is None:
                raise ValueError("result must be present when success=True")
            if self.error is not None:
                raise ValueError("error must be None when success=True")
        else:
            if self.error is None:
                raise ValueError("error must be present when success=False")
            if self.result is not None:
                raise ValueError("result must be None when success=False")
        return self
