"""Task executors: the single scarce resource that processes prompts."""

from docbot.config import Settings
from docbot.errors import ExecutorInitError
from docbot.services.executor.base import ITaskExecutor, artifact_filename, executor_session
from docbot.services.executor.providers import ClaudeExecutor, CommandExecutor


def create_executor(settings: Settings) -> ITaskExecutor:
    """Build the executor selected by ``settings.executor_backend``."""
    backend = settings.executor_backend.lower()
    if backend == "claude":
        return ClaudeExecutor(
            api_key=settings.anthropic_api_key,
            model=settings.anthropic_model,
            max_tokens=settings.anthropic_max_tokens,
        )
    if backend == "command":
        return CommandExecutor(settings.executor_command, timeout=settings.unit_timeout_seconds)
    raise ExecutorInitError(f"Unknown executor backend: {settings.executor_backend}")


__all__ = [
    "ClaudeExecutor",
    "CommandExecutor",
    "ITaskExecutor",
    "artifact_filename",
    "create_executor",
    "executor_session",
]
