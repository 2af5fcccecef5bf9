"""Tests for DashScope task-polling provider."""

import json

import httpx
import pytest

from aipic.models.assets import RemoteAsset, TaskStatus
from aipic.models.errors import ErrorCode, ImageGenerationError
from aipic.providers.dashscope_provider import (
    DASHSCOPE_MODEL,
    DASHSCOPE_STEPS,
    DASHSCOPE_SUBMIT_URL,
    DashScopeProvider,
    parse_task,
)

from conftest import DASHSCOPE_KEY, IMAGE_URL, mock_client


def submit_response(task_id: str = "task-123") -> httpx.Response:
    return httpx.Response(200, json={"request_id": "req-1", "output": {"task_id": task_id, "task_status": "PENDING"}})


def status_response(status: str, **output) -> httpx.Response:
    return httpx.Response(200, json={"request_id": "req-2", "output": {"task_id": "task-123", "task_status": status, **output}})


def clone(response: httpx.Response) -> httpx.Response:
    return httpx.Response(response.status_code, content=response.content, headers=response.headers)


class DashScopeStub:
    """Answers the submit call once, then replays status responses in order."""

    def __init__(self, statuses: list[httpx.Response], submit: httpx.Response | None = None):
        self.submit = submit or submit_response()
        self.statuses = statuses
        self.requests: list[httpx.Request] = []
        self.status_reads = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "POST":
            return clone(self.submit)
        index = min(self.status_reads, len(self.statuses) - 1)
        self.status_reads += 1
        return clone(self.statuses[index])


@pytest.mark.asyncio
async def test_dashscope_provider_pending_running_succeeded(no_sleep):
    """Pending, Running, Succeeded yields the first result URL of the final read."""
    stub = DashScopeStub([
        status_response("PENDING"),
        status_response("RUNNING"),
        status_response("SUCCEEDED", results=[{"url": IMAGE_URL}, {"url": "https://x/other.png"}]),
    ])

    async with mock_client(stub) as client:
        provider = DashScopeProvider(api_key=DASHSCOPE_KEY, client=client, sleep=no_sleep)
        asset = await provider.submit_and_await("A red dragon", 1024, 768)

    assert asset == RemoteAsset(url=IMAGE_URL)
    assert stub.status_reads == 3
    assert provider.poll_count == 3
    assert no_sleep.calls == [10.0, 10.0]

    submit = stub.requests[0]
    assert str(submit.url) == DASHSCOPE_SUBMIT_URL
    assert submit.headers["X-DashScope-Async"] == "enable"
    assert submit.headers["Authorization"] == f"Bearer {DASHSCOPE_KEY}"
    body = json.loads(submit.content)
    assert body["model"] == DASHSCOPE_MODEL
    assert body["input"] == {"prompt": "A red dragon"}
    assert body["parameters"]["size"] == "1024*768"
    assert body["parameters"]["steps"] == DASHSCOPE_STEPS
    assert isinstance(body["parameters"]["seed"], int)

    status_request = stub.requests[1]
    assert status_request.method == "GET"
    assert status_request.url.path.endswith("/tasks/task-123")


@pytest.mark.asyncio
async def test_dashscope_provider_failed_task_reports_upstream_message(no_sleep):
    """Running, Running, Failed surfaces the provider's failure message."""
    stub = DashScopeStub([
        status_response("RUNNING"),
        status_response("RUNNING"),
        status_response("FAILED", code="DataInspectionFailed", message="NSFW content"),
    ])

    async with mock_client(stub) as client:
        provider = DashScopeProvider(api_key=DASHSCOPE_KEY, client=client, sleep=no_sleep)
        with pytest.raises(ImageGenerationError) as exc_info:
            await provider.submit_and_await("A red dragon", 1024, 1024)

    assert exc_info.value.error_code == ErrorCode.PROVIDER_ERROR
    assert "NSFW content" in exc_info.value.message
    assert stub.status_reads == 3


@pytest.mark.asyncio
async def test_dashscope_provider_times_out_without_terminal_state(no_sleep):
    """Never reaching a terminal state yields TIMEOUT after the attempt ceiling."""
    stub = DashScopeStub([status_response("RUNNING", results=[{"url": "https://x/stale.png"}])])

    async with mock_client(stub) as client:
        provider = DashScopeProvider(api_key=DASHSCOPE_KEY, client=client, sleep=no_sleep)
        with pytest.raises(ImageGenerationError) as exc_info:
            await provider.submit_and_await("A red dragon", 1024, 1024)

    assert exc_info.value.error_code == ErrorCode.TIMEOUT
    assert exc_info.value.message == "generation timed out"
    assert stub.status_reads == 30


@pytest.mark.asyncio
async def test_dashscope_provider_unknown_status(no_sleep):
    stub = DashScopeStub([status_response("PENDING"), status_response("CANCELED")])

    async with mock_client(stub) as client:
        provider = DashScopeProvider(api_key=DASHSCOPE_KEY, client=client, sleep=no_sleep)
        with pytest.raises(ImageGenerationError) as exc_info:
            await provider.submit_and_await("A red dragon", 1024, 1024)

    assert exc_info.value.error_code == ErrorCode.PROVIDER_ERROR
    assert "unknown task status" in exc_info.value.message
    assert "CANCELED" in exc_info.value.message
    assert stub.status_reads == 2


@pytest.mark.asyncio
async def test_dashscope_provider_succeeded_without_results(no_sleep):
    stub = DashScopeStub([status_response("SUCCEEDED", results=[])])

    async with mock_client(stub) as client:
        provider = DashScopeProvider(api_key=DASHSCOPE_KEY, client=client, sleep=no_sleep)
        with pytest.raises(ImageGenerationError) as exc_info:
            await provider.submit_and_await("A red dragon", 1024, 1024)

    assert exc_info.value.error_code == ErrorCode.PROVIDER_ERROR
    assert "no image URL found" in exc_info.value.message


@pytest.mark.asyncio
async def test_dashscope_provider_missing_task_id(no_sleep):
    """Submission must return a task id."""
    stub = DashScopeStub([], submit=httpx.Response(200, json={"request_id": "req-1", "output": {}}))

    async with mock_client(stub) as client:
        provider = DashScopeProvider(api_key=DASHSCOPE_KEY, client=client, sleep=no_sleep)
        with pytest.raises(ImageGenerationError) as exc_info:
            await provider.submit_and_await("A red dragon", 1024, 1024)

    assert exc_info.value.error_code == ErrorCode.PROVIDER_ERROR
    assert stub.status_reads == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("status, expected_code", [(401, ErrorCode.AUTH_ERROR), (429, ErrorCode.RATE_LIMITED)])
async def test_dashscope_provider_submit_http_errors(status, expected_code, no_sleep):
    stub = DashScopeStub([], submit=httpx.Response(status, json={"code": "Throttling", "message": "irrelevant"}))

    async with mock_client(stub) as client:
        provider = DashScopeProvider(api_key=DASHSCOPE_KEY, client=client, sleep=no_sleep)
        with pytest.raises(ImageGenerationError) as exc_info:
            await provider.submit_and_await("A red dragon", 1024, 1024)

    assert exc_info.value.error_code == expected_code


@pytest.mark.asyncio
async def test_dashscope_provider_status_read_errors_end_polling(no_sleep):
    """HTTP failures while polling are classified and not retried."""
    stub = DashScopeStub([status_response("RUNNING"), httpx.Response(429, json={"message": "slow down"})])

    async with mock_client(stub) as client:
        provider = DashScopeProvider(api_key=DASHSCOPE_KEY, client=client, sleep=no_sleep)
        with pytest.raises(ImageGenerationError) as exc_info:
            await provider.submit_and_await("A red dragon", 1024, 1024)

    assert exc_info.value.error_code == ErrorCode.RATE_LIMITED
    assert stub.status_reads == 2


@pytest.mark.asyncio
async def test_dashscope_provider_submit_timeout(no_sleep):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    async with mock_client(handler) as client:
        provider = DashScopeProvider(api_key=DASHSCOPE_KEY, client=client, sleep=no_sleep)
        with pytest.raises(ImageGenerationError) as exc_info:
            await provider.submit_and_await("A red dragon", 1024, 1024)

    assert exc_info.value.error_code == ErrorCode.TIMEOUT


def test_parse_task_maps_statuses():
    task = parse_task("t", {"output": {"task_id": "t", "task_status": "RUNNING"}})
    assert task.status == TaskStatus.RUNNING
    assert task.in_progress is True

    task = parse_task("t", {"output": {"task_status": "SUCCEEDED", "results": [{"url": IMAGE_URL}]}})
    assert task.status == TaskStatus.SUCCEEDED
    assert task.result_url == IMAGE_URL
    assert task.in_progress is False

    task = parse_task("t", {"output": {"task_status": "SUSPENDED"}})
    assert task.status == TaskStatus.UNKNOWN
    assert task.raw_status == "SUSPENDED"

    task = parse_task("t", {"output": None})
    assert task.status == TaskStatus.UNKNOWN
    assert task.task_id == "t"
