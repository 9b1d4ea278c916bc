"""Base interface for task executors."""

from __future__ import annotations

import logging
import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

_SLUG_MAX_CHARS = 48


class ITaskExecutor(Protocol):
    """Protocol for the scarce resource that turns one prompt into one artifact.

    An executor instance is used by one job at a time, between ``start``
    and ``close``. Callers must not invoke ``run_unit`` concurrently.
    """

    @property
    def name(self) -> str:
        """Executor name identifier."""
        ...

    async def start(self) -> None:
        """Open the executor session.

        Raises:
            ExecutorInitError: If the session cannot be opened.
        """
        ...

    async def run_unit(self, prompt: str, output_dir: Path, index: int) -> str:
        """Run one prompt and write its artifact into ``output_dir``.

        Args:
            prompt: Raw prompt text.
            output_dir: Job output directory (exists).
            index: Zero-based position of the prompt in the job.

        Returns:
            Filename of the artifact, relative to ``output_dir``.

        Raises:
            ExecutorError: If no artifact could be produced.
        """
        ...

    async def close(self) -> None:
        """Release session resources. Safe to call more than once."""
        ...


@asynccontextmanager
async def executor_session(executor: ITaskExecutor) -> AsyncIterator[ITaskExecutor]:
    """Start ``executor`` and guarantee ``close`` on every exit path."""
    await executor.start()
    try:
        yield executor
    finally:
        try:
            await executor.close()
        except Exception:
            logger.exception("Error closing %s executor", executor.name)


def artifact_filename(prompt: str, index: int) -> str:
    """Markdown artifact name for a prompt, e.g. ``03-write-a-readme.md``."""
    first_line = next((line for line in prompt.splitlines() if line.strip()), "")
    slug = re.sub(r"[^a-z0-9]+", "-", first_line.lower()).strip("-")
    slug = slug[:_SLUG_MAX_CHARS].rstrip("-") or "prompt"
    return f"{index + 1:02d}-{slug}.md"
