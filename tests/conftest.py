"""Shared pytest fixtures for aipic tests."""

import io
from typing import Callable

import httpx
import pytest
from PIL import Image

from aipic.config import Settings
from aipic.services.storage_service import StorageService

MODELSCOPE_KEY = "ms-test-key"
DASHSCOPE_KEY = "sk-test-key"
IMAGE_URL = "https://x/img.png"


def make_png(width: int = 1024, height: int = 1024, color: str = "red") -> bytes:
    """Encode a solid-color PNG."""
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


class RecordingSleep:
    """Sleep replacement that records requested delays without waiting."""

    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    """AsyncClient whose requests are answered by handler."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def png_bytes():
    """Fixture for a 1024x1024 PNG, the providers' native output size."""
    return make_png()


@pytest.fixture
def no_sleep():
    """Fixture for a sleep that returns immediately."""
    return RecordingSleep()


@pytest.fixture
def settings():
    """Fixture for settings that never read the process environment."""
    return Settings(api_key_env_vars=("AIPIC_TEST_KEY",))


@pytest.fixture
def storage_service(tmp_path):
    """Fixture for storage that writes generated files into tmp_path."""
    return StorageService(candidate_dirs=[tmp_path])
