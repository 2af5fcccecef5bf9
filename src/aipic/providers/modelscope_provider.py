"""ModelScope image generation provider (synchronous endpoint)."""

import logging

import httpx

from aipic.models.assets import AssetReference, RemoteAsset
from aipic.models.errors import ErrorCode, ImageGenerationError
from aipic.providers.base import map_http_error, parse_json

logger = logging.getLogger(__name__)

MODELSCOPE_GENERATION_URL = "https://api-inference.modelscope.cn/v1/images/generations"
MODELSCOPE_MODEL = "MusePublic/489_ckpt_FLUX_1"


class ModelScopeProvider:
    """Image provider returning the image URL in the same response that accepted the prompt."""

    name = "modelscope"

    def __init__(
        self,
        api_key: str,
        client: httpx.AsyncClient,
        timeout_seconds: float = 60.0,
        model: str = MODELSCOPE_MODEL,
    ):
        """
        Initialize ModelScope provider.

        Args:
            api_key: ModelScope API key (``ms-...``)
            client: HTTP client owned by the caller
            timeout_seconds: Timeout for the generation call
            model: ModelScope model identifier
        """
        if not api_key:
            raise ValueError("api_key is required for ModelScope")

        self.api_key = api_key
        self.client = client
        self.timeout_seconds = timeout_seconds
        self.model = model

    async def submit_and_await(self, prompt: str, width: int, height: int) -> AssetReference:
        """
        Generate an image with one synchronous call.

        The endpoint renders at its native size; width and height are applied later by resizing.

        Raises:
            ImageGenerationError: AUTH_ERROR, RATE_LIMITED, TIMEOUT or PROVIDER_ERROR
        """
        payload = {
            "model": self.model,
            "prompt": prompt,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        logger.info(f"🎨 [ModelScope] Generating image with {self.model}")

        try:
            response = await self.client.post(
                MODELSCOPE_GENERATION_URL,
                json=payload,
                headers=headers,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise map_http_error(e, "ModelScope")

        body = parse_json(response, "ModelScope")
        images = body.get("images") or []
        first = images[0] if isinstance(images, list) and images else None
        image_url = first.get("url") if isinstance(first, dict) else None

        if not image_url:
            raise ImageGenerationError(
                ErrorCode.PROVIDER_ERROR,
                "Invalid response from ModelScope API - no image URL found",
            )

        logger.info("✅ [ModelScope] Image ready")
        return RemoteAsset(url=image_url)
