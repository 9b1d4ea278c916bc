"""FastAPI dependencies."""

from __future__ import annotations

from docbot.config import Settings
from docbot.jobs.manager import JobManager
from docbot.jobs.runner import ExecutorFactory
from docbot.services.prompt_source import PromptSource

_job_manager: JobManager | None = None


def init_job_manager(
    settings: Settings,
    executor_factory: ExecutorFactory | None = None,
    prompt_source: PromptSource | None = None,
) -> JobManager:
    """Initialize the global JobManager (called at app startup)."""
    global _job_manager
    _job_manager = JobManager(settings, executor_factory, prompt_source)
    return _job_manager


def reset_job_manager() -> None:
    global _job_manager
    _job_manager = None


def get_job_manager() -> JobManager:
    """Dependency that provides the JobManager instance."""
    if _job_manager is None:
        raise RuntimeError("JobManager not initialized, call init_job_manager() first")
    return _job_manager
