"""Provider selection keyed on API key format."""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable

import httpx

from aipic.config import Settings
from aipic.models.assets import AssetReference
from aipic.models.errors import ErrorCode, ImageGenerationError, allows_fallback
from aipic.providers.base import ImageProvider
from aipic.providers.dashscope_provider import DashScopeProvider
from aipic.providers.modelscope_provider import ModelScopeProvider

logger = logging.getLogger(__name__)


class CredentialKind(str, Enum):
    """Backend a credential belongs to, judged by its prefix."""

    MODELSCOPE = "modelscope"
    DASHSCOPE = "dashscope"
    UNRECOGNIZED = "unrecognized"


CREDENTIAL_PREFIXES = {
    "ms-": CredentialKind.MODELSCOPE,
    "sk-": CredentialKind.DASHSCOPE,
}


def classify_credential(api_key: str) -> CredentialKind:
    """Classify an API key by prefix."""
    for prefix, kind in CREDENTIAL_PREFIXES.items():
        if api_key.startswith(prefix):
            return kind
    return CredentialKind.UNRECOGNIZED


def create_provider(
    name: str,
    api_key: str,
    client: httpx.AsyncClient,
    settings: Settings,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> ImageProvider:
    """Instantiate a provider by name with timeouts from settings."""
    if name == CredentialKind.MODELSCOPE.value:
        return ModelScopeProvider(
            api_key=api_key,
            client=client,
            timeout_seconds=settings.generation_timeout_seconds,
        )
    if name == CredentialKind.DASHSCOPE.value:
        return DashScopeProvider(
            api_key=api_key,
            client=client,
            timeout_seconds=settings.submit_timeout_seconds,
            max_attempts=settings.poll_max_attempts,
            interval_seconds=settings.poll_interval_seconds,
            sleep=sleep,
        )
    raise ValueError(f"Unsupported provider: {name}")


class FallbackProvider:
    """
    Tries providers in order, moving on only after AUTH_ERROR or PROVIDER_ERROR.

    Used for keys whose format matches no provider. Best effort: the last
    provider's failure is the one reported.
    """

    def __init__(self, providers: list[ImageProvider]):
        if not providers:
            raise ValueError("at least one provider is required")
        self.providers = providers
        self.active: ImageProvider = providers[0]

    @property
    def name(self) -> str:
        return self.active.name

    @property
    def poll_count(self) -> int:
        return sum(getattr(p, "poll_count", 0) for p in self.providers)

    async def submit_and_await(self, prompt: str, width: int, height: int) -> AssetReference:
        for provider in self.providers[:-1]:
            self.active = provider
            try:
                return await provider.submit_and_await(prompt, width, height)
            except ImageGenerationError as e:
                if not allows_fallback(e.error_code):
                    raise
                logger.warning(f"⚠️ [ProviderFactory] {provider.name} failed ({e.error_code.value}), trying next provider")

        self.active = self.providers[-1]
        return await self.active.submit_and_await(prompt, width, height)


def build_provider(
    api_key: str,
    client: httpx.AsyncClient,
    settings: Settings,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> ImageProvider:
    """
    Select the provider for an API key.

    Recognized prefixes map to exactly one provider. Unrecognized keys go to
    settings.unrecognized_key_providers in order, or fail with VALIDATION_ERROR
    when none are configured.
    """
    kind = classify_credential(api_key)
    if kind != CredentialKind.UNRECOGNIZED:
        return create_provider(kind.value, api_key, client, settings, sleep)

    if not settings.unrecognized_key_providers:
        raise ImageGenerationError(ErrorCode.VALIDATION_ERROR, "unrecognized credential format")

    providers = [
        create_provider(name, api_key, client, settings, sleep)
        for name in settings.unrecognized_key_providers
    ]
    if len(providers) == 1:
        return providers[0]
    return FallbackProvider(providers)
