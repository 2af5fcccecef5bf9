"""Response models for aipic."""

from typing import Optional

from pydantic import BaseModel, Field

from aipic.models.errors import ErrorCode, ImageGenerationError


class GenerationError(BaseModel):
    """Error details for a failed generation."""

    code: ErrorCode = Field(..., description="Error category code")
    message: str = Field(..., description="User-friendly error message")
    details: Optional[dict] = Field(None, description="Optional additional context for debugging")

    @classmethod
    def from_exception(cls, exc: ImageGenerationError) -> "GenerationError":
        return cls(code=exc.error_code, message=exc.message)
