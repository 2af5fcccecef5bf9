"""Tests for the bounded task polling loop."""

import pytest

from aipic.models.errors import ErrorCode, ImageGenerationError
from aipic.services.retry_service import DEFAULT_INTERVAL_SECONDS, DEFAULT_MAX_ATTEMPTS, poll_until_complete


class StatusSequence:
    """Async status reader that replays a fixed list of statuses, repeating the last one."""

    def __init__(self, statuses: list[str]):
        self.statuses = statuses
        self.call_count = 0

    async def __call__(self, task_id: str) -> str:
        index = min(self.call_count, len(self.statuses) - 1)
        self.call_count += 1
        return self.statuses[index]


def is_pending(status: str) -> bool:
    return status in ("PENDING", "RUNNING")


@pytest.mark.asyncio
async def test_poll_returns_first_terminal_result(no_sleep):
    """Polling stops at the first non-pending read."""
    reader = StatusSequence(["PENDING", "RUNNING", "SUCCEEDED"])

    result = await poll_until_complete(reader, "task-1", is_pending=is_pending, sleep=no_sleep)

    assert result == "SUCCEEDED"
    assert reader.call_count == 3
    assert no_sleep.calls == [DEFAULT_INTERVAL_SECONDS, DEFAULT_INTERVAL_SECONDS]


@pytest.mark.asyncio
async def test_poll_succeeds_on_first_read(no_sleep):
    """No sleep happens when the first read is already terminal."""
    reader = StatusSequence(["FAILED"])

    result = await poll_until_complete(reader, "task-1", is_pending=is_pending, sleep=no_sleep)

    assert result == "FAILED"
    assert reader.call_count == 1
    assert no_sleep.calls == []


@pytest.mark.asyncio
async def test_poll_times_out_at_attempt_ceiling(no_sleep):
    """Exhausting the attempt ceiling raises TIMEOUT instead of returning a pending result."""
    reader = StatusSequence(["RUNNING"])

    with pytest.raises(ImageGenerationError) as exc_info:
        await poll_until_complete(reader, "task-1", is_pending=is_pending, sleep=no_sleep)

    assert exc_info.value.error_code == ErrorCode.TIMEOUT
    assert exc_info.value.message == "generation timed out"
    assert reader.call_count == DEFAULT_MAX_ATTEMPTS
    assert len(no_sleep.calls) == DEFAULT_MAX_ATTEMPTS - 1


@pytest.mark.asyncio
async def test_poll_respects_custom_limits(no_sleep):
    """Attempt ceiling and interval are configurable."""
    reader = StatusSequence(["PENDING"])

    with pytest.raises(ImageGenerationError):
        await poll_until_complete(
            reader,
            "task-1",
            is_pending=is_pending,
            max_attempts=3,
            interval_seconds=0.5,
            sleep=no_sleep,
        )

    assert reader.call_count == 3
    assert no_sleep.calls == [0.5, 0.5]


@pytest.mark.asyncio
async def test_poll_does_not_retry_exceptions(no_sleep):
    """An exception from a status read ends polling immediately and propagates unchanged."""
    calls = 0

    async def failing_reader(task_id: str) -> str:
        nonlocal calls
        calls += 1
        raise ImageGenerationError(ErrorCode.AUTH_ERROR, "Invalid API key")

    with pytest.raises(ImageGenerationError) as exc_info:
        await poll_until_complete(failing_reader, "task-1", is_pending=is_pending, sleep=no_sleep)

    assert exc_info.value.error_code == ErrorCode.AUTH_ERROR
    assert calls == 1
    assert no_sleep.calls == []
