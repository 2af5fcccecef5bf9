"""Models package for aipic."""

from aipic.models.assets import AssetReference, GenerationTask, LocalAsset, RemoteAsset, TaskStatus
from aipic.models.errors import ErrorCode, ImageGenerationError, allows_fallback
from aipic.models.image_responses import GenerationResult, ImageGenerationResponse
from aipic.models.metrics import GenerationMetrics
from aipic.models.requests import DEFAULT_HEIGHT, DEFAULT_WIDTH, ImageGenerationRequest
from aipic.models.responses import GenerationError

__all__ = [
    "AssetReference",
    "DEFAULT_HEIGHT",
    "DEFAULT_WIDTH",
    "ErrorCode",
    "GenerationError",
    "GenerationMetrics",
    "GenerationResult",
    "GenerationTask",
    "ImageGenerationError",
    "ImageGenerationRequest",
    "ImageGenerationResponse",
    "LocalAsset",
    "RemoteAsset",
    "TaskStatus",
    "allows_fallback",
]
