"""Fetch the bytes behind a provider's asset reference."""

import asyncio
import logging

import httpx

from aipic.models.assets import AssetReference, LocalAsset
from aipic.models.errors import ErrorCode, ImageGenerationError

logger = logging.getLogger(__name__)


class DownloadService:
    """Loads generated images from remote URLs or local temporary files."""

    def __init__(self, client: httpx.AsyncClient, timeout_seconds: float = 90.0):
        self.client = client
        self.timeout_seconds = timeout_seconds

    async def fetch(self, asset: AssetReference) -> bytes:
        """
        Return the image bytes for an asset reference.

        Local files are read as-is and left in place; cleanup belongs to whoever created them.

        Raises:
            ImageGenerationError: DOWNLOAD_ERROR for any transport, HTTP or read failure
        """
        if isinstance(asset, LocalAsset):
            try:
                return await asyncio.to_thread(asset.path.read_bytes)
            except OSError as e:
                raise ImageGenerationError(
                    ErrorCode.DOWNLOAD_ERROR,
                    f"Failed to read generated image {asset.path}: {str(e)}",
                    original_exception=e,
                )

        try:
            response = await self.client.get(asset.url, timeout=self.timeout_seconds, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ImageGenerationError(
                ErrorCode.DOWNLOAD_ERROR,
                f"Failed to download image: HTTP {e.response.status_code}",
                original_exception=e,
            )
        except httpx.HTTPError as e:
            raise ImageGenerationError(
                ErrorCode.DOWNLOAD_ERROR,
                f"Failed to download image: {str(e) or type(e).__name__}",
                original_exception=e,
            )

        logger.debug(f"[DownloadService] Downloaded {len(response.content)} bytes")
        return response.content
