"""Global admission gate for the single task-executor slot."""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class Permit:
    """Proof of exclusive use of the executor slot."""

    id: int
    holder: str
    released: bool = False


class ExecutionSerializer:
    """Grants at most one permit at a time, in request order.

    Backed by ``asyncio.Lock``, whose waiters are woken first-come
    first-served. Prefer ``hold()`` so the permit is returned on every
    exit path, including cancellation and timeouts.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._ids = itertools.count(1)
        self._current: Permit | None = None
        self._waiting = 0

    @property
    def busy(self) -> bool:
        return self._current is not None

    @property
    def waiting(self) -> int:
        return self._waiting

    @property
    def holder(self) -> str | None:
        return self._current.holder if self._current else None

    async def acquire(self, holder: str = "") -> Permit:
        self._waiting += 1
        try:
            await self._lock.acquire()
        finally:
            self._waiting -= 1
        self._current = Permit(next(self._ids), holder)
        logger.debug("Permit %d granted to %s", self._current.id, holder)
        return self._current

    def release(self, permit: Permit) -> None:
        if permit.released:
            raise RuntimeError(f"Permit {permit.id} already released")
        if permit is not self._current:
            raise RuntimeError(f"Permit {permit.id} is not the outstanding permit")
        permit.released = True
        self._current = None
        self._lock.release()
        logger.debug("Permit %d released by %s", permit.id, permit.holder)

    @asynccontextmanager
    async def hold(self, holder: str = "") -> AsyncIterator[Permit]:
        permit = await self.acquire(holder)
        try:
            yield permit
        finally:
            self.release(permit)
