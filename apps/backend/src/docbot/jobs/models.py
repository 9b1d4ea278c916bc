"""Job domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


class JobStatus(str, Enum):
    """Status of a job."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


# Allowed lifecycle moves. Terminal states have no outgoing edges.
TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.PENDING: frozenset({JobStatus.RUNNING}),
    JobStatus.RUNNING: frozenset({JobStatus.COMPLETED, JobStatus.FAILED}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.FAILED: frozenset(),
}


@dataclass
class UnitResult:
    """Outcome of one prompt."""

    index: int
    success: bool
    artifact_ref: str | None = None
    error_message: str | None = None
    timestamp: datetime = field(default_factory=utcnow)

    @classmethod
    def ok(cls, index: int, artifact_ref: str) -> UnitResult:
        return cls(index=index, success=True, artifact_ref=artifact_ref)

    @classmethod
    def failed(cls, index: int, error_message: str) -> UnitResult:
        return cls(index=index, success=False, error_message=error_message)

    def to_public(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "success": self.success,
            "artifactRef": self.artifact_ref,
            "errorMessage": self.error_message,
            "timestamp": _iso(self.timestamp),
        }


@dataclass
class Job:
    """A prompt-processing job."""

    id: str = field(default_factory=lambda: str(uuid4()))
    status: JobStatus = JobStatus.PENDING
    progress: int = 0
    total: int = 0
    current_task: str = ""
    results: list[UnitResult] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    completed_at: datetime | None = None
    error: str | None = None

    @property
    def successful(self) -> int:
        return sum(1 for r in self.results if r.success)

    def to_public(self) -> dict[str, Any]:
        """JSON-ready snapshot with camelCase keys, as sent to clients."""
        return {
            "id": self.id,
            "status": self.status.value,
            "progress": self.progress,
            "total": self.total,
            "currentTask": self.current_task,
            "results": [r.to_public() for r in self.results],
            "createdAt": _iso(self.created_at),
            "completedAt": _iso(self.completed_at),
            "error": self.error,
        }
