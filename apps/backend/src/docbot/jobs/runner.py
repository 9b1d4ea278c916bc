"""Per-job control loop."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path

from docbot.errors import DocBotError, ExecutorError
from docbot.jobs.broadcaster import EventBroadcaster
from docbot.jobs.events import Event
from docbot.jobs.models import Job, JobStatus, UnitResult, utcnow
from docbot.jobs.registry import JobRegistry
from docbot.jobs.retention import RetentionScheduler
from docbot.jobs.serializer import ExecutionSerializer
from docbot.services.executor import ITaskExecutor, executor_session
from docbot.services.prompt_source import PromptSource

logger = logging.getLogger(__name__)

ExecutorFactory = Callable[[], ITaskExecutor]


class JobRunner:
    """Drives one job's prompt list to a terminal state.

    Prompts run in order, one executor call at a time system-wide. A prompt
    failure (executor error or timeout) is recorded and the loop continues;
    only failing to resolve prompts or to start the executor fails the job.
    """

    def __init__(
        self,
        job_id: str,
        *,
        registry: JobRegistry,
        serializer: ExecutionSerializer,
        broadcaster: EventBroadcaster,
        retention: RetentionScheduler,
        executor_factory: ExecutorFactory,
        prompt_source: PromptSource,
        output_dir: Path,
        unit_timeout: float | None = None,
        retention_ttl: float = 3600.0,
    ) -> None:
        self.job_id = job_id
        self.output_dir = output_dir
        self._registry = registry
        self._serializer = serializer
        self._broadcaster = broadcaster
        self._retention = retention
        self._executor_factory = executor_factory
        self._prompt_source = prompt_source
        self._unit_timeout = unit_timeout
        self._retention_ttl = retention_ttl

    async def run(self, prompts: list[str] | None = None) -> Job | None:
        """Run the job and return its final snapshot."""
        if self.job_id not in self._registry:
            logger.warning("Refusing to run unknown job %s", self.job_id)
            return None

        try:
            await self._update(status=JobStatus.RUNNING, current_task="Initializing")
            self._log("Initializing job")

            units = await self._resolve_prompts(prompts)
            await self._update(total=len(units), current_task=f"Loaded {len(units)} prompt(s)")
            self._log(f"Loaded {len(units)} prompt(s)")

            await asyncio.to_thread(self.output_dir.mkdir, parents=True, exist_ok=True)
            async with executor_session(self._executor_factory()) as executor:
                self._log(f"Executor '{executor.name}' ready")
                for index, prompt in enumerate(units):
                    await self._run_unit(executor, index, prompt, len(units))

            await self._finish()
        except (DocBotError, OSError) as exc:
            await self._fail(str(exc) or type(exc).__name__)
        except Exception as exc:
            logger.exception("Unexpected error in job %s", self.job_id)
            await self._fail(f"{type(exc).__name__}: {exc}")

        self._retention.arm(self.job_id, self.output_dir, self._retention_ttl)
        return self._registry.get(self.job_id)

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    async def _resolve_prompts(self, prompts: list[str] | None) -> list[str]:
        if prompts:
            await self._update(current_task="Using custom prompts")
            return list(prompts)
        await self._update(current_task="Loading default prompts")
        return await asyncio.to_thread(self._prompt_source.load)

    async def _run_unit(
        self, executor: ITaskExecutor, index: int, prompt: str, total: int
    ) -> None:
        position = f"{index + 1}/{total}"
        await self._update(current_task=f"Waiting for executor ({position})")

        async with self._serializer.hold(self.job_id):
            await self._update(current_task=f"Processing prompt {position}")
            deadline = asyncio.timeout(self._unit_timeout)
            try:
                async with deadline:
                    artifact = await executor.run_unit(prompt, self.output_dir, index)
                result = UnitResult.ok(index, artifact)
            except TimeoutError as exc:
                if deadline.expired():
                    message = f"Timed out after {self._unit_timeout:g}s"
                else:
                    message = f"Executor timed out: {exc}" if str(exc) else "Executor timed out"
                result = UnitResult.failed(index, message)
            except ExecutorError as exc:
                result = UnitResult.failed(index, str(exc) or type(exc).__name__)
            except Exception as exc:
                logger.exception("Prompt %s of job %s crashed", position, self.job_id)
                result = UnitResult.failed(index, f"{type(exc).__name__}: {exc}")

        if result.success:
            status = f"Prompt {position} completed: {result.artifact_ref}"
        else:
            status = f"Prompt {position} failed: {result.error_message}"
            logger.warning("Job %s: %s", self.job_id, status)

        def record(job: Job) -> None:
            job.results.append(result)
            job.progress += 1
            job.current_task = status

        await self._registry.mutate(self.job_id, record)
        self._log(f"[{position}] {status}")

    async def _finish(self) -> None:
        job = await self._update(
            status=JobStatus.COMPLETED,
            current_task="Completed successfully",
            completed_at=utcnow(),
        )
        if job is None:
            return
        logger.info(
            "Job %s completed: %d/%d prompts succeeded", job.id, job.successful, job.total
        )
        self._broadcaster.publish(Event.job_completed(job))

    async def _fail(self, message: str) -> None:
        logger.error("Job %s failed: %s", self.job_id, message)
        job = await self._update(
            status=JobStatus.FAILED,
            current_task="Failed",
            error=message,
            completed_at=utcnow(),
        )
        if job is not None:
            self._broadcaster.publish(Event.job_failed(self.job_id, message))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _update(self, **fields: object) -> Job | None:
        def apply(job: Job) -> None:
            for name, value in fields.items():
                setattr(job, name, value)

        return await self._registry.mutate(self.job_id, apply)

    def _log(self, message: str) -> None:
        self._broadcaster.publish(Event.log(self.job_id, message))
