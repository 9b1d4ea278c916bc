"""Deferred deletion of job artifact directories."""

from __future__ import annotations

import asyncio
import logging
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)


def purge_directory(path: Path) -> bool:
    """Remove ``path`` recursively. Returns False if it was already gone."""
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        return False
    return True


class RetentionScheduler:
    """One cancellable deletion timer per job.

    Timers are plain asyncio tasks; they are lost on process exit.
    """

    def __init__(self) -> None:
        self._timers: dict[str, asyncio.Task[None]] = {}

    @property
    def pending(self) -> int:
        return len(self._timers)

    def is_armed(self, job_id: str) -> bool:
        return job_id in self._timers

    def arm(self, job_id: str, output_dir: Path, ttl: float) -> None:
        """Schedule deletion of ``output_dir`` ``ttl`` seconds from now."""
        if self.cancel(job_id):
            logger.warning("Re-arming retention timer for job %s", job_id)
        task = asyncio.create_task(
            self._expire(job_id, output_dir, ttl), name=f"retention-{job_id}"
        )
        self._timers[job_id] = task
        task.add_done_callback(lambda t: self._forget(job_id, t))
        logger.info("Job %s outputs scheduled for removal in %.0fs", job_id, ttl)

    def cancel(self, job_id: str) -> bool:
        task = self._timers.pop(job_id, None)
        if task is None:
            return False
        task.cancel()
        return True

    async def shutdown(self) -> None:
        """Cancel every pending timer without deleting anything."""
        tasks = list(self._timers.values())
        self._timers.clear()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    def _forget(self, job_id: str, task: asyncio.Task[None]) -> None:
        if self._timers.get(job_id) is task:
            del self._timers[job_id]

    async def _expire(self, job_id: str, output_dir: Path, ttl: float) -> None:
        await asyncio.sleep(ttl)
        try:
            removed = await asyncio.to_thread(purge_directory, output_dir)
        except OSError:
            logger.exception("Error cleaning outputs of job %s", job_id)
            return
        if removed:
            logger.info("Auto-cleaned outputs of job %s", job_id)
        else:
            logger.debug("Outputs of job %s already gone", job_id)
