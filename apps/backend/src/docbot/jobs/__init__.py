"""Job orchestration for the Docbot API."""

from docbot.jobs.broadcaster import EventBroadcaster, Subscription
from docbot.jobs.events import Event, EventType
from docbot.jobs.manager import JobManager
from docbot.jobs.models import Job, JobStatus, UnitResult
from docbot.jobs.registry import JobRegistry
from docbot.jobs.retention import RetentionScheduler
from docbot.jobs.runner import JobRunner
from docbot.jobs.serializer import ExecutionSerializer, Permit

__all__ = [
    "Event",
    "EventBroadcaster",
    "EventType",
    "ExecutionSerializer",
    "Job",
    "JobManager",
    "JobRegistry",
    "JobRunner",
    "JobStatus",
    "Permit",
    "RetentionScheduler",
    "Subscription",
    "UnitResult",
]
