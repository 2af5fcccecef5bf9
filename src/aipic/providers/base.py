"""Base provider interface for image generation."""

from typing import Any, Protocol

import httpx
from typing_extensions import runtime_checkable

from aipic.models.assets import AssetReference
from aipic.models.errors import ErrorCode, ImageGenerationError


@runtime_checkable
class ImageProvider(Protocol):
    """Protocol for image generation providers."""

    name: str

    async def submit_and_await(self, prompt: str, width: int, height: int) -> AssetReference:
        """
        Generate one image and wait until it is available.

        Args:
            prompt: Text prompt for image generation
            width: Requested width in pixels
            height: Requested height in pixels

        Returns:
            Reference to the generated image (remote URL or local file)

        Raises:
            ImageGenerationError: Classified provider failure
        """
        ...


def upstream_message(response: httpx.Response) -> str:
    """Extract the provider's own error message (and code) from a failed response."""
    try:
        body: Any = response.json()
    except ValueError:
        return response.text.strip() or response.reason_phrase

    if isinstance(body, dict):
        message = body.get("message") or body.get("error") or body.get("errors")
        code = body.get("code")
        if isinstance(message, dict):
            message = message.get("message")
        if message and code:
            return f"{message} (code: {code})"
        if message:
            return str(message)
    return response.text.strip() or response.reason_phrase


def map_http_error(exc: Exception, provider_name: str) -> ImageGenerationError:
    """
    Classify an httpx failure.

    401 -> AUTH_ERROR, 429 -> RATE_LIMITED, timeouts -> TIMEOUT,
    everything else -> PROVIDER_ERROR with the upstream message when present.
    """
    if isinstance(exc, httpx.TimeoutException):
        return ImageGenerationError(
            ErrorCode.TIMEOUT,
            f"{provider_name} request timed out. The image generation took too long.",
            original_exception=exc,
        )

    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        if status == 401:
            return ImageGenerationError(
                ErrorCode.AUTH_ERROR,
                f"Invalid API key. Please check your {provider_name} API key.",
                original_exception=exc,
            )
        if status == 429:
            return ImageGenerationError(
                ErrorCode.RATE_LIMITED,
                f"{provider_name} rate limit exceeded. Please try again later.",
                original_exception=exc,
            )
        return ImageGenerationError(
            ErrorCode.PROVIDER_ERROR,
            f"{provider_name} API error {status}: {upstream_message(exc.response)}",
            original_exception=exc,
        )

    return ImageGenerationError(
        ErrorCode.PROVIDER_ERROR,
        f"{provider_name} API error: {str(exc)}",
        original_exception=exc,
    )


def parse_json(response: httpx.Response, provider_name: str) -> dict[str, Any]:
    """Decode a JSON object body or fail with PROVIDER_ERROR."""
    try:
        body = response.json()
    except ValueError as e:
        raise ImageGenerationError(
            ErrorCode.PROVIDER_ERROR,
            f"Invalid response from {provider_name} API - body is not JSON",
            original_exception=e,
        )
    if not isinstance(body, dict):
        raise ImageGenerationError(
            ErrorCode.PROVIDER_ERROR,
            f"Invalid response from {provider_name} API - expected a JSON object",
        )
    return body
