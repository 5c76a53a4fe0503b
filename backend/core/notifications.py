"""
In-process fan-out of inventory change summaries to SSE subscribers.

Every event is `{"type": "update", "count": <total rows>}`. The payload is a
summary rather than a diff, so a client that missed events only needs to
refetch on reconnect.

All methods run on the event loop. The subscriber list is only replaced
(compacted) inside `broadcast`, never mutated while being iterated.
"""
import asyncio
import itertools
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger("stocklist.notifications")

Counter = Callable[[AsyncSession], Awaitable[int]]

QUEUE_SIZE = 100


def update_event(count: int) -> Dict[str, Any]:
    return {"type": "update", "count": count}


def format_sse(payload: Dict[str, Any]) -> str:
    return f"data: {json.dumps(payload)}\n\n"


def keepalive_message() -> str:
    # SSE comment line; EventSource ignores it
    return ": keepalive\n\n"


@dataclass(eq=False)
class Subscription:
    id: int
    queue: asyncio.Queue = field(default_factory=lambda: asyncio.Queue(maxsize=QUEUE_SIZE))
    closed: bool = False

    def deliver(self, payload: Dict[str, Any]) -> None:
        try:
            self.queue.put_nowait(payload)
        except asyncio.QueueFull:
            # Slow reader: drop the oldest summary, the newest one supersedes it
            try:
                self.queue.get_nowait()
            except asyncio.QueueEmpty:
                pass
            self.queue.put_nowait(payload)

    async def get(self) -> Dict[str, Any]:
        return await self.queue.get()


class ChangeNotificationBus:
    def __init__(self, counter: Counter):
        self._counter = counter
        self._subscribers: List[Subscription] = []
        self._ids = itertools.count(1)

    @property
    def subscriber_count(self) -> int:
        return sum(1 for s in self._subscribers if not s.closed)

    async def subscribe(self, db: AsyncSession) -> Subscription:
        """Register a connection and queue the current snapshot for it."""
        count = await self._counter(db)
        sub = Subscription(id=next(self._ids))
        sub.deliver(update_event(count))
        self._subscribers.append(sub)
        logger.info("SSE client connected", extra={"clientId": sub.id, "clientCount": self.subscriber_count})
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        if sub.closed:
            return
        sub.closed = True
        logger.info("SSE client disconnected", extra={"clientId": sub.id, "clientCount": self.subscriber_count})

    async def broadcast(self, db: AsyncSession) -> int:
        """
        Push the current item count to every open subscription.

        Best effort: returns how many subscriptions received the event and
        never raises.
        """
        try:
            count = await self._counter(db)
        except Exception:
            logger.exception("Error notifying clients")
            return 0

        self._subscribers = [s for s in self._subscribers if not s.closed]
        payload = update_event(count)
        delivered = 0
        for sub in list(self._subscribers):
            try:
                sub.deliver(payload)
                delivered += 1
            except Exception:
                logger.warning("Dropping SSE client after failed delivery", extra={"clientId": sub.id}, exc_info=True)
                sub.closed = True

        logger.info("Notified clients of update", extra={"clientCount": delivered, "count": count})
        return delivered


def get_notification_bus(request: Request) -> ChangeNotificationBus:
    return request.app.state.notifications
