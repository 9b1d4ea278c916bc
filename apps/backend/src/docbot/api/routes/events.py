"""Live event channel."""

from __future__ import annotations

import asyncio
import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from docbot.api.deps import get_job_manager
from docbot.jobs.broadcaster import Subscription

logger = logging.getLogger(__name__)

router = APIRouter(tags=["events"])


async def _pump(ws: WebSocket, sub: Subscription) -> None:
    async for event in sub:
        await ws.send_json(event.to_message())


async def _drain(ws: WebSocket, sub: Subscription) -> None:
    """Read and discard inbound messages until the peer disconnects."""
    while True:
        message = await ws.receive()
        if message["type"] == "websocket.disconnect":
            return
        text = message.get("text")
        if text is None:
            logger.debug("Observer %d sent binary frame, ignored", sub.id)
            continue
        try:
            json.loads(text)
        except ValueError:
            logger.warning("Observer %d sent malformed payload, ignored", sub.id)
        else:
            logger.debug("Observer %d sent a message, ignored", sub.id)


@router.websocket("/ws")
@router.websocket("/")
async def events(ws: WebSocket) -> None:
    """Push-only stream of job events; inbound messages are ignored."""
    broadcaster = get_job_manager().broadcaster
    await ws.accept()
    sub = broadcaster.subscribe()
    tasks = [
        asyncio.create_task(_pump(ws, sub)),
        asyncio.create_task(_drain(ws, sub)),
    ]
    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            exc = task.exception()
            if exc is not None and not isinstance(exc, WebSocketDisconnect):
                logger.warning("Observer %d connection error: %s", sub.id, exc)
    finally:
        # No awaits here: the server may cancel this handler once the peer is gone.
        broadcaster.unsubscribe(sub)
        for task in tasks:
            task.cancel()
