"""Job manager with in-memory storage and background execution."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from docbot.config import Settings
from docbot.errors import JobConflictError
from docbot.jobs.broadcaster import EventBroadcaster
from docbot.jobs.models import Job
from docbot.jobs.registry import JobRegistry
from docbot.jobs.retention import RetentionScheduler
from docbot.jobs.runner import ExecutorFactory, JobRunner
from docbot.jobs.serializer import ExecutionSerializer
from docbot.services.executor import create_executor
from docbot.services.prompt_source import PromptSource

logger = logging.getLogger(__name__)


class JobManager:
    """Creates jobs and runs each one as a background asyncio task.

    Jobs run concurrently but share one ExecutionSerializer, so the task
    executor only ever sees one prompt at a time.
    """

    def __init__(
        self,
        settings: Settings,
        executor_factory: ExecutorFactory | None = None,
        prompt_source: PromptSource | None = None,
    ) -> None:
        self.settings = settings
        self.outputs_root = Path(settings.outputs_dir).resolve()
        self.broadcaster = EventBroadcaster(queue_size=settings.subscriber_queue_size)
        self.registry = JobRegistry(self.broadcaster)
        self.serializer = ExecutionSerializer()
        self.retention = RetentionScheduler()
        self._executor_factory = executor_factory or (lambda: create_executor(settings))
        self._prompt_source = prompt_source or PromptSource(settings.prompts_dir)
        self._tasks: dict[str, asyncio.Task[Job | None]] = {}

    @property
    def active_jobs(self) -> int:
        return len(self._tasks)

    def create_job(self, prompts: list[str] | None = None) -> Job:
        """Create a new job and schedule it for background execution.

        Args:
            prompts: Explicit prompt list; the default prompt source is used
                when this is None or empty.

        Returns:
            Snapshot of the created job (status=pending).

        Raises:
            JobConflictError: If concurrent jobs are disabled and one is active.
        """
        if self.settings.reject_concurrent_jobs and self._tasks:
            raise JobConflictError("Another job is still running")

        job = self.registry.create()
        job_id = job.id
        runner = JobRunner(
            job_id,
            registry=self.registry,
            serializer=self.serializer,
            broadcaster=self.broadcaster,
            retention=self.retention,
            executor_factory=self._executor_factory,
            prompt_source=self._prompt_source,
            output_dir=self.output_dir(job_id),
            unit_timeout=self.settings.unit_timeout_seconds,
            retention_ttl=self.settings.retention_ttl_seconds,
        )
        task = asyncio.create_task(runner.run(prompts), name=f"job-{job_id}")
        self._tasks[job_id] = task
        task.add_done_callback(lambda _: self._tasks.pop(job_id, None))

        return job

    def get_job(self, job_id: str) -> Job | None:
        """Get a job snapshot by ID."""
        return self.registry.get(job_id)

    def list_jobs(self) -> list[Job]:
        """List all jobs, most recent first."""
        return self.registry.list_all()

    # ------------------------------------------------------------------
    # Outputs
    # ------------------------------------------------------------------

    def output_dir(self, job_id: str) -> Path:
        return self.outputs_root / job_id

    def list_outputs(self, job_id: str) -> list[str]:
        """Markdown artifacts currently present in the job's output directory."""
        directory = self.output_dir(job_id)
        if not directory.is_dir():
            return []
        return sorted(
            p.name for p in directory.glob("*.md") if p.is_file() and not p.name.startswith(".")
        )

    def resolve_output(self, job_id: str, filename: str) -> Path | None:
        """Path of an artifact inside the job directory, or None if absent."""
        directory = self.output_dir(job_id)
        path = (directory / filename).resolve()
        if path.parent != directory or not path.is_file():
            return None
        return path

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def wait_idle(self) -> None:
        """Wait until every running job reached a terminal state."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    async def shutdown(self) -> None:
        """Stop runners and pending retention timers."""
        tasks = list(self._tasks.values())
        if tasks:
            logger.info("Cancelling %d running job(s)", len(tasks))
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        await self.retention.shutdown()
