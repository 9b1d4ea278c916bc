"""Live events pushed to observers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from docbot.jobs.models import Job, utcnow


class EventType(str, Enum):
    """Kind of a live event."""

    CONNECTED = "connected"
    JOB_UPDATE = "job_update"
    LOG = "log"
    JOB_COMPLETED = "job_completed"
    JOB_FAILED = "job_failed"


@dataclass(frozen=True)
class Event:
    """One message on the live channel."""

    type: EventType
    job_id: str | None = None
    payload: dict[str, Any] = field(default_factory=dict)

    def to_message(self) -> dict[str, Any]:
        message: dict[str, Any] = {"type": self.type.value}
        if self.job_id is not None:
            message["jobId"] = self.job_id
        message.update(self.payload)
        return message

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def connected(cls) -> Event:
        return cls(EventType.CONNECTED, payload={"message": "WebSocket connection established"})

    @classmethod
    def job_update(cls, job: Job) -> Event:
        return cls(EventType.JOB_UPDATE, job.id, {"job": job.to_public()})

    @classmethod
    def log(cls, job_id: str, message: str) -> Event:
        return cls(
            EventType.LOG,
            job_id,
            {"message": message, "timestamp": utcnow().isoformat()},
        )

    @classmethod
    def job_completed(cls, job: Job) -> Event:
        successful = job.successful
        return cls(
            EventType.JOB_COMPLETED,
            job.id,
            {
                "message": f"Job completed: {successful}/{job.total} prompts processed successfully",
                "successful": successful,
                "total": job.total,
                "results": [r.to_public() for r in job.results],
            },
        )

    @classmethod
    def job_failed(cls, job_id: str, error: str) -> Event:
        return cls(EventType.JOB_FAILED, job_id, {"message": error})
