"""aipic - text-to-image generation for web assets, served over MCP."""

from aipic.config import Settings
from aipic.models.assets import AssetReference, GenerationTask, LocalAsset, RemoteAsset, TaskStatus
from aipic.models.errors import ErrorCode, ImageGenerationError
from aipic.models.image_responses import GenerationResult, ImageGenerationResponse
from aipic.models.metrics import GenerationMetrics
from aipic.models.requests import ImageGenerationRequest
from aipic.models.responses import GenerationError
from aipic.providers.base import ImageProvider
from aipic.providers.dashscope_provider import DashScopeProvider
from aipic.providers.factory import CredentialKind, build_provider, classify_credential
from aipic.providers.modelscope_provider import ModelScopeProvider
from aipic.services.image_service import ImageService

__version__ = "1.0.0"

__all__ = [
    # Configuration
    "Settings",
    # Request/Response types
    "ImageGenerationRequest",
    "ImageGenerationResponse",
    "GenerationResult",
    "GenerationError",
    "GenerationMetrics",
    "ErrorCode",
    "ImageGenerationError",
    # Assets
    "AssetReference",
    "RemoteAsset",
    "LocalAsset",
    "GenerationTask",
    "TaskStatus",
    # Providers
    "ImageProvider",
    "ModelScopeProvider",
    "DashScopeProvider",
    "CredentialKind",
    "build_provider",
    "classify_credential",
    # Services
    "ImageService",
]
