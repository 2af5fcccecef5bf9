"""Image generation service that drives providers, downloads, resizing and storage."""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Awaitable, Callable, Mapping, Optional

import httpx

from aipic.config import Settings
from aipic.models.errors import ErrorCode, ImageGenerationError
from aipic.models.image_responses import GenerationResult, ImageGenerationResponse
from aipic.models.metrics import GenerationMetrics
from aipic.models.requests import ImageGenerationRequest
from aipic.models.responses import GenerationError
from aipic.providers.base import ImageProvider
from aipic.providers.factory import build_provider
from aipic.services.download_service import DownloadService
from aipic.services.image_processor import inspect_image, resize_image
from aipic.services.storage_service import StorageService

logger = logging.getLogger(__name__)


class ImageService:
    """Turns a prompt into a saved image using whichever provider the API key belongs to."""

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
        storage_service: StorageService | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize image service.

        Args:
            settings: Configuration (defaults to Settings.from_env())
            client: Shared HTTP client. When omitted each generate() call opens and closes its own.
            storage_service: Storage service (created from settings.output_dir if not provided)
            sleep: Awaitable sleep used between task status reads
            environ: Environment consulted for fallback API keys (defaults to os.environ)
        """
        self.settings = settings or Settings.from_env()
        self.storage_service = storage_service or StorageService(output_dir=self.settings.output_dir)
        self._client = client
        self._sleep = sleep
        self._environ = environ

    @asynccontextmanager
    async def _client_scope(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient() as client:
            yield client

    async def generate(self, request: ImageGenerationRequest) -> ImageGenerationResponse:
        """
        Generate, download, optionally resize, and save one image.

        Never raises: every failure comes back as a response with success=False.

        Args:
            request: Image generation request

        Returns:
            ImageGenerationResponse with the saved image or a classified error
        """
        start_time = time.time()
        provider: ImageProvider | None = None
        resized = False

        try:
            if not request.prompt or not request.prompt.strip():
                raise ImageGenerationError(ErrorCode.VALIDATION_ERROR, "Prompt is required and cannot be empty")

            api_key = self.settings.resolve_api_key(request.api_key, self._environ)
            if not api_key:
                raise ImageGenerationError(
                    ErrorCode.VALIDATION_ERROR,
                    "API key is required. Pass apiKey or set one of: "
                    + ", ".join(self.settings.api_key_env_vars),
                )

            async with self._client_scope() as client:
                provider = build_provider(api_key, client, self.settings, self._sleep)
                logger.info(f"🎨 [ImageService] Generating {request.width}x{request.height} image via {provider.name}")

                asset = await provider.submit_and_await(request.prompt, request.width, request.height)

                downloader = DownloadService(client, timeout_seconds=self.settings.download_timeout_seconds)
                image_bytes = await downloader.fetch(asset)

            if request.needs_resize():
                image_bytes = await asyncio.to_thread(resize_image, image_bytes, request.width, request.height)
                resized = True
                width, height, mime_type = request.width, request.height, "image/jpeg"
                extension = "jpg"
            else:
                info = inspect_image(image_bytes)
                if info.width is None:
                    logger.warning("⚠️ [ImageService] Could not read image size, reporting requested dimensions")
                width = info.width or request.width
                height = info.height or request.height
                mime_type = info.mime_type
                extension = info.extension

            saved_path = await self.storage_service.save_image(
                image_bytes,
                output_path=request.output_path,
                extension=extension,
            )

            result = GenerationResult(
                saved_path=str(saved_path),
                width=width,
                height=height,
                image_bytes=image_bytes,
                mime_type=mime_type,
                prompt=request.prompt,
                provider=provider.name,
            )

            return ImageGenerationResponse(
                success=True,
                result=result,
                metrics=self._metrics(start_time, provider, resized),
            )

        except ImageGenerationError as e:
            logger.warning(f"❌ [ImageService] {e.error_code.value}: {e.message}")
            return ImageGenerationResponse(
                success=False,
                error=GenerationError.from_exception(e),
                metrics=self._metrics(start_time, provider, resized),
            )
        except Exception as e:
            logger.error(f"❌ [ImageService] Unexpected error: {str(e)}", exc_info=True)
            return ImageGenerationResponse(
                success=False,
                error=GenerationError(
                    code=ErrorCode.INTERNAL_ERROR,
                    message=f"Unexpected error: {str(e)}",
                ),
                metrics=self._metrics(start_time, provider, resized),
            )

    def _metrics(self, start_time: float, provider: ImageProvider | None, resized: bool) -> GenerationMetrics:
        return GenerationMetrics(
            duration_ms=int((time.time() - start_time) * 1000),
            provider_used=provider.name if provider else None,
            poll_count=getattr(provider, "poll_count", 0),
            resized=resized,
            timestamp=datetime.now(timezone.utc),
        )
