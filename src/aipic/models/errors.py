"""Error code definitions for aipic."""

from enum import Enum


class ErrorCode(str, Enum):
    """Error category codes for image generation."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTH_ERROR = "AUTH_ERROR"
    RATE_LIMITED = "RATE_LIMITED"
    TIMEOUT = "TIMEOUT"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    DOWNLOAD_ERROR = "DOWNLOAD_ERROR"
    FILESYSTEM_ERROR = "FILESYSTEM_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# Provider failures after which an unrecognized credential may be tried elsewhere
FALLBACK_ERRORS = {
    ErrorCode.AUTH_ERROR,
    ErrorCode.PROVIDER_ERROR,
}


def allows_fallback(code: ErrorCode) -> bool:
    """Check if an error code permits trying the next provider."""
    return code in FALLBACK_ERRORS


class ImageGenerationError(Exception):
    """Classified failure raised inside the generation workflow."""

    def __init__(self, error_code: ErrorCode, message: str, original_exception: Exception | None = None):
        super().__init__(message)
        self.error_code = error_code
        self.message = message
        self.original_exception = original_exception
