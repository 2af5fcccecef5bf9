"""DashScope image generation provider (asynchronous task API)."""

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable

import httpx

from aipic.models.assets import AssetReference, GenerationTask, RemoteAsset, TaskStatus
from aipic.models.errors import ErrorCode, ImageGenerationError
from aipic.providers.base import map_http_error, parse_json
from aipic.services.retry_service import DEFAULT_INTERVAL_SECONDS, DEFAULT_MAX_ATTEMPTS, poll_until_complete

logger = logging.getLogger(__name__)

DASHSCOPE_SUBMIT_URL = "https://dashscope.aliyuncs.com/api/v1/services/aigc/text2image/image-synthesis"
DASHSCOPE_TASK_URL = "https://dashscope.aliyuncs.com/api/v1/tasks/{task_id}"
DASHSCOPE_MODEL = "flux-schnell"
DASHSCOPE_STEPS = 4
MAX_SEED = 2**31 - 1


class DashScopeProvider:
    """Image provider that submits a task and polls it until completion."""

    name = "dashscope"

    def __init__(
        self,
        api_key: str,
        client: httpx.AsyncClient,
        timeout_seconds: float = 30.0,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        model: str = DASHSCOPE_MODEL,
    ):
        """
        Initialize DashScope provider.

        Args:
            api_key: DashScope API key (``sk-...``)
            client: HTTP client owned by the caller
            timeout_seconds: Timeout for submission and each status read
            max_attempts: Status reads before giving up with TIMEOUT
            interval_seconds: Delay between status reads
            sleep: Awaitable sleep used between reads
            model: DashScope text-to-image model
        """
        if not api_key:
            raise ValueError("api_key is required for DashScope")

        self.api_key = api_key
        self.client = client
        self.timeout_seconds = timeout_seconds
        self.max_attempts = max_attempts
        self.interval_seconds = interval_seconds
        self.sleep = sleep
        self.model = model
        self.poll_count = 0

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def submit_and_await(self, prompt: str, width: int, height: int) -> AssetReference:
        """
        Submit an asynchronous generation task and poll it to completion.

        Raises:
            ImageGenerationError: AUTH_ERROR, RATE_LIMITED, TIMEOUT or PROVIDER_ERROR
        """
        task_id = await self.submit_task(prompt, width, height)

        task = await poll_until_complete(
            self.fetch_task,
            task_id,
            is_pending=lambda t: t.in_progress,
            max_attempts=self.max_attempts,
            interval_seconds=self.interval_seconds,
            sleep=self.sleep,
        )

        if task.status == TaskStatus.FAILED:
            logger.warning(f"🚫 [DashScope] Task {task_id} failed: {task.failure_message}")
            raise ImageGenerationError(
                ErrorCode.PROVIDER_ERROR,
                f"DashScope generation failed: {task.failure_message or 'unknown error'}",
            )
        if task.status == TaskStatus.UNKNOWN:
            raise ImageGenerationError(
                ErrorCode.PROVIDER_ERROR,
                f"DashScope returned unknown task status: {task.raw_status}",
            )
        if not task.result_url:
            raise ImageGenerationError(
                ErrorCode.PROVIDER_ERROR,
                "Invalid response from DashScope API - no image URL found",
            )

        logger.info(f"✅ [DashScope] Task {task_id} succeeded after {self.poll_count} status reads")
        return RemoteAsset(url=task.result_url)

    async def submit_task(self, prompt: str, width: int, height: int) -> str:
        """Create a generation task and return its identifier."""
        payload = {
            "model": self.model,
            "input": {"prompt": prompt},
            "parameters": {
                "size": f"{width}*{height}",
                "seed": random.randint(1, MAX_SEED),
                "steps": DASHSCOPE_STEPS,
            },
        }
        headers = self._headers()
        headers["X-DashScope-Async"] = "enable"

        try:
            response = await self.client.post(
                DASHSCOPE_SUBMIT_URL,
                json=payload,
                headers=headers,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise map_http_error(e, "DashScope")

        body = parse_json(response, "DashScope")
        output = body.get("output") or {}
        task_id = output.get("task_id") if isinstance(output, dict) else None
        if not task_id:
            raise ImageGenerationError(
                ErrorCode.PROVIDER_ERROR,
                f"DashScope did not return a task id: {body.get('message') or body}",
            )

        logger.info(f"🎨 [DashScope] Submitted task {task_id} ({width}*{height}, {self.model})")
        return task_id

    async def fetch_task(self, task_id: str) -> GenerationTask:
        """Perform one status read for a task."""
        self.poll_count += 1

        try:
            response = await self.client.get(
                DASHSCOPE_TASK_URL.format(task_id=task_id),
                headers=self._headers(),
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise map_http_error(e, "DashScope")

        task = parse_task(task_id, parse_json(response, "DashScope"))
        logger.debug(f"[DashScope] Task {task_id} status {task.raw_status} (read {self.poll_count})")
        return task


def parse_task(task_id: str, body: dict[str, Any]) -> GenerationTask:
    """Build a task snapshot from a DashScope status response."""
    output = body.get("output")
    if not isinstance(output, dict):
        output = {}
    raw_status = output.get("task_status")

    result_url = None
    results = output.get("results") or []
    for result in results:
        if isinstance(result, dict) and result.get("url"):
            result_url = result["url"]
            break

    return GenerationTask(
        task_id=output.get("task_id") or task_id,
        status=TaskStatus.parse(raw_status),
        raw_status=raw_status,
        result_url=result_url,
        failure_message=output.get("message") or body.get("message"),
    )
