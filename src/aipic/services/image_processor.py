"""Pillow-backed resize and format detection for generated images."""

import io
from typing import Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from aipic.models.errors import ErrorCode, ImageGenerationError

JPEG_QUALITY = 90

MIME_TYPES = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "WEBP": "image/webp",
    "GIF": "image/gif",
}

EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
}


class ImageInfo:
    """Format and native size of encoded image bytes."""

    def __init__(self, mime_type: str, width: Optional[int] = None, height: Optional[int] = None):
        self.mime_type = mime_type
        self.width = width
        self.height = height

    @property
    def extension(self) -> str:
        return EXTENSIONS.get(self.mime_type, "png")


def inspect_image(image_bytes: bytes, default_mime: str = "image/png") -> ImageInfo:
    """Read format and dimensions without decoding pixel data. Unknown formats keep default_mime and no size."""
    try:
        with Image.open(io.BytesIO(image_bytes)) as image:
            return ImageInfo(
                mime_type=MIME_TYPES.get(image.format or "", default_mime),
                width=image.width,
                height=image.height,
            )
    except (UnidentifiedImageError, OSError):
        return ImageInfo(mime_type=default_mime)


def resize_image(image_bytes: bytes, width: int, height: int, quality: int = JPEG_QUALITY) -> bytes:
    """
    Resize to exactly width x height with cover cropping and re-encode as JPEG.

    Args:
        image_bytes: Encoded source image
        width: Target width in pixels
        height: Target height in pixels
        quality: JPEG quality (1-95)

    Returns:
        JPEG-encoded bytes

    Raises:
        ImageGenerationError: PROVIDER_ERROR when the source bytes are not a decodable image
    """
    try:
        with Image.open(io.BytesIO(image_bytes)) as image:
            fitted = ImageOps.fit(image.convert("RGB"), (width, height), method=Image.Resampling.LANCZOS)
    except (UnidentifiedImageError, OSError) as e:
        raise ImageGenerationError(
            ErrorCode.PROVIDER_ERROR,
            f"Generated image could not be decoded for resizing: {str(e)}",
            original_exception=e,
        )

    output = io.BytesIO()
    fitted.save(output, format="JPEG", quality=quality)
    return output.getvalue()
