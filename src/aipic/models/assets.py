"""Asset references and task state produced by providers."""

from enum import Enum
from pathlib import Path
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class RemoteAsset(BaseModel):
    """Generated image reachable over HTTP."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["remote"] = "remote"
    url: str = Field(..., min_length=1, description="URL of the generated image")


class LocalAsset(BaseModel):
    """Generated image already present on the local filesystem."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["local"] = "local"
    path: Path = Field(..., description="Path of the temporary image file")


AssetReference = Union[RemoteAsset, LocalAsset]


class TaskStatus(str, Enum):
    """Lifecycle states of an asynchronous generation task."""

    PENDING = "PENDING"
    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, raw: str | None) -> "TaskStatus":
        try:
            return cls((raw or "").upper())
        except ValueError:
            return cls.UNKNOWN


class GenerationTask(BaseModel):
    """Snapshot of a polled task, as returned by one status read."""

    model_config = ConfigDict(frozen=True)

    task_id: str
    status: TaskStatus
    raw_status: Optional[str] = None
    result_url: Optional[str] = None
    failure_message: Optional[str] = None

    @property
    def in_progress(self) -> bool:
        return self.status in (TaskStatus.PENDING, TaskStatus.RUNNING)
