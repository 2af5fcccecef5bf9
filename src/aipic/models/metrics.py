"""Metrics models for aipic."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class GenerationMetrics(BaseModel):
    """Tracking data for a generation operation."""

    duration_ms: int = Field(..., ge=0, description="Total generation time in milliseconds")
    provider_used: Optional[str] = Field(None, description="Provider that produced the image")
    poll_count: int = Field(0, ge=0, description="Task status reads performed (0 for direct providers)")
    resized: bool = Field(False, description="Whether the image went through the resize step")
    timestamp: Optional[datetime] = Field(None, description="When the generation completed (UTC)")
