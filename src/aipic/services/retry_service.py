"""Bounded polling for asynchronous provider tasks."""

import asyncio
from typing import Any, Awaitable, Callable, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_result,
    stop_after_attempt,
    wait_fixed,
)

from aipic.models.errors import ErrorCode, ImageGenerationError

T = TypeVar("T")

# Standard polling configuration: 30 status reads, 10s apart
DEFAULT_MAX_ATTEMPTS = 30
DEFAULT_INTERVAL_SECONDS = 10.0


async def poll_until_complete(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    is_pending: Callable[[T], bool],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    **kwargs: Any,
) -> T:
    """
    Call an async status read until it returns a non-pending result.

    Exceptions raised by func are not retried; they end the loop immediately.

    Args:
        func: Async function performing one status read
        *args: Positional arguments for func
        is_pending: Predicate returning True while another read is needed
        max_attempts: Maximum number of calls to func
        interval_seconds: Delay between calls
        sleep: Awaitable sleep, replaceable for tests; asyncio.sleep honors task cancellation
        **kwargs: Keyword arguments for func

    Returns:
        The first non-pending result

    Raises:
        ImageGenerationError: TIMEOUT when max_attempts reads all came back pending
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_fixed(interval_seconds),
        retry=retry_if_result(is_pending),
        sleep=sleep,
    )

    try:
        return await retrying(func, *args, **kwargs)
    except RetryError as e:
        raise ImageGenerationError(
            ErrorCode.TIMEOUT,
            "generation timed out",
            original_exception=e,
        )
