"""Local storage for generated images."""

import asyncio
import logging
import os
import tempfile
import uuid
from pathlib import Path
from typing import Optional, Sequence

from aipic.models.errors import ErrorCode, ImageGenerationError

logger = logging.getLogger(__name__)


def default_candidate_dirs(output_dir: Optional[str] = None) -> list[Path]:
    """Directories tried, in order, when the caller gives no output path."""
    candidates: list[Path] = []
    if output_dir:
        candidates.append(Path(output_dir).expanduser())
    candidates.append(Path.home() / "Desktop")
    candidates.append(Path(tempfile.gettempdir()))
    candidates.append(Path.cwd())
    return candidates


class StorageService:
    """Resolves output paths and writes image bytes to disk."""

    def __init__(
        self,
        output_dir: Optional[str] = None,
        candidate_dirs: Optional[Sequence[Path]] = None,
    ):
        """
        Initialize storage service.

        Args:
            output_dir: Preferred directory, tried before the built-in candidates
            candidate_dirs: Full replacement for the candidate directory list
        """
        self.candidate_dirs = list(candidate_dirs) if candidate_dirs is not None else default_candidate_dirs(output_dir)

    def generate_filename(self, extension: str = "jpg", prefix: str = "web_image") -> str:
        unique_id = uuid.uuid4().hex[:8]
        return f"{prefix}_{unique_id}.{extension}"

    def pick_directory(self) -> Path:
        """Return the first candidate that exists and is writable, falling back to the working directory."""
        for candidate in self.candidate_dirs:
            if candidate.is_dir() and os.access(candidate, os.W_OK):
                return candidate
        return Path.cwd()

    def resolve_path(self, output_path: Optional[str] = None, extension: str = "jpg") -> Path:
        """
        Resolve where an image will be written.

        An explicit output_path is used verbatim (``~`` expanded, relative paths
        taken from the working directory). Otherwise a unique filename is placed
        in the first usable candidate directory.
        """
        if output_path:
            path = Path(output_path).expanduser()
            if not path.is_absolute():
                path = Path.cwd() / path
            return path

        return self.pick_directory() / self.generate_filename(extension)

    async def save_image(
        self,
        image_bytes: bytes,
        output_path: Optional[str] = None,
        extension: str = "jpg",
    ) -> Path:
        """
        Write image bytes, creating parent directories as needed. Existing files are overwritten.

        Returns:
            Absolute path of the written file

        Raises:
            ImageGenerationError: FILESYSTEM_ERROR if the directory or file cannot be written
        """
        path = self.resolve_path(output_path, extension)

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(image_bytes)

        try:
            await asyncio.to_thread(_write)
        except OSError as e:
            raise ImageGenerationError(
                ErrorCode.FILESYSTEM_ERROR,
                f"Failed to save image to {path}: {str(e)}",
                original_exception=e,
            )

        logger.info(f"💾 [StorageService] Saved {len(image_bytes)} bytes to {path}")
        return path
