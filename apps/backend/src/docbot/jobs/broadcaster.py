"""Fan-out of live events to attached observers."""

from __future__ import annotations

import asyncio
import itertools
import logging

from docbot.jobs.events import Event

logger = logging.getLogger(__name__)


class Subscription:
    """One observer's bounded delivery queue.

    When the queue is full the oldest pending event is dropped, so a slow
    consumer only ever loses its own backlog.
    """

    def __init__(self, subscriber_id: int, maxsize: int) -> None:
        self.id = subscriber_id
        self.dropped = 0
        self._queue: asyncio.Queue[Event] = asyncio.Queue(maxsize=maxsize)

    def offer(self, event: Event) -> None:
        """Enqueue without waiting, evicting the oldest event on overflow."""
        if self._queue.full():
            self._queue.get_nowait()
            self.dropped += 1
        self._queue.put_nowait(event)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    async def get(self) -> Event:
        return await self._queue.get()

    def get_nowait(self) -> Event:
        return self._queue.get_nowait()

    def __aiter__(self) -> Subscription:
        return self

    async def __anext__(self) -> Event:
        return await self._queue.get()


class EventBroadcaster:
    """Publishes events to every currently attached subscription.

    ``publish`` never awaits, so runners are never slowed down by observers.
    Observers only see events published after they subscribed.
    """

    def __init__(self, queue_size: int = 256) -> None:
        if queue_size < 1:
            raise ValueError("queue_size must be at least 1")
        self._queue_size = queue_size
        self._subscribers: dict[int, Subscription] = {}
        self._ids = itertools.count(1)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> Subscription:
        """Attach a new observer; its first event is ``connected``."""
        sub = Subscription(next(self._ids), self._queue_size)
        sub.offer(Event.connected())
        self._subscribers[sub.id] = sub
        logger.info("Observer %d attached (%d total)", sub.id, len(self._subscribers))
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        if self._subscribers.pop(sub.id, None) is not None:
            logger.info(
                "Observer %d detached (%d dropped events, %d total)",
                sub.id,
                sub.dropped,
                len(self._subscribers),
            )

    def publish(self, event: Event) -> None:
        """Deliver ``event`` to all observers, best effort."""
        for sub in list(self._subscribers.values()):
            try:
                sub.offer(event)
            except Exception:
                logger.exception("Dropping event %s for observer %d", event.type.value, sub.id)
