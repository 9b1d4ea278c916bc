"""In-memory job table with atomic, broadcast-on-write mutations."""

from __future__ import annotations

import asyncio
import copy
import logging
from collections.abc import Callable

from docbot.errors import InvalidJobTransition
from docbot.jobs.broadcaster import EventBroadcaster
from docbot.jobs.events import Event
from docbot.jobs.models import TRANSITIONS, Job

logger = logging.getLogger(__name__)

JobUpdate = Callable[[Job], None]


def _check_transition(before: Job, after: Job) -> None:
    """Raise InvalidJobTransition if ``after`` is not a legal successor of ``before``."""
    if after.id != before.id:
        raise InvalidJobTransition(f"Job id is immutable ({before.id} -> {after.id})")
    if after.status != before.status and after.status not in TRANSITIONS[before.status]:
        raise InvalidJobTransition(
            f"Job {before.id}: illegal transition {before.status.value} -> {after.status.value}"
        )
    if not 0 <= after.progress <= after.total:
        raise InvalidJobTransition(
            f"Job {before.id}: progress {after.progress} outside 0..{after.total}"
        )
    if len(after.results) != after.progress:
        raise InvalidJobTransition(
            f"Job {before.id}: {len(after.results)} results for progress {after.progress}"
        )
    if after.results[: len(before.results)] != before.results:
        raise InvalidJobTransition(f"Job {before.id}: recorded results cannot be rewritten")
    if before.progress > 0 and after.total != before.total:
        raise InvalidJobTransition(f"Job {before.id}: total is fixed once processing started")


class JobRegistry:
    """Owns every Job; readers only ever get copies.

    Mutations for one job are serialized by a per-job lock and applied to a
    private copy that replaces the stored job only if it passes validation.
    Each applied mutation publishes exactly one ``job_update`` event.
    """

    def __init__(self, broadcaster: EventBroadcaster) -> None:
        self._broadcaster = broadcaster
        self._jobs: dict[str, Job] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def create(self) -> Job:
        """Register a new pending job and return a snapshot of it."""
        job = Job()
        self._jobs[job.id] = job
        self._locks[job.id] = asyncio.Lock()
        logger.info("Created job %s", job.id)
        return copy.deepcopy(job)

    def get(self, job_id: str) -> Job | None:
        job = self._jobs.get(job_id)
        return copy.deepcopy(job) if job is not None else None

    def list_all(self) -> list[Job]:
        """All jobs, most recent first."""
        jobs = sorted(self._jobs.values(), key=lambda j: j.created_at, reverse=True)
        return [copy.deepcopy(j) for j in jobs]

    def __contains__(self, job_id: object) -> bool:
        return job_id in self._jobs

    def __len__(self) -> int:
        return len(self._jobs)

    async def mutate(self, job_id: str, update: JobUpdate) -> Job | None:
        """Apply ``update`` atomically and broadcast the resulting snapshot.

        Returns the new snapshot, or None when the job is unknown or already
        terminal (both are no-ops). Raises InvalidJobTransition, leaving the
        stored job untouched, when the update breaks the job lifecycle.
        """
        lock = self._locks.get(job_id)
        if lock is None:
            return None

        async with lock:
            current = self._jobs[job_id]
            if current.status.is_terminal:
                logger.warning(
                    "Ignoring mutation of job %s in terminal state %s",
                    job_id,
                    current.status.value,
                )
                return None

            draft = copy.deepcopy(current)
            update(draft)
            _check_transition(current, draft)
            self._jobs[job_id] = draft

            snapshot = copy.deepcopy(draft)
            self._broadcaster.publish(Event.job_update(snapshot))
            return snapshot
