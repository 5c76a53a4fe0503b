import asyncio
from typing import AsyncGenerator, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.notifications import (
    ChangeNotificationBus,
    Subscription,
    format_sse,
    get_notification_bus,
    keepalive_message,
)
from db.database import get_async_session

router = APIRouter()


async def _event_generator(
    request: Request,
    bus: ChangeNotificationBus,
    db: AsyncSession,
    keepalive_seconds: float,
) -> AsyncGenerator[str, None]:
    # Registration happens on first iteration, so a stream that is never
    # started never holds a subscription.
    subscription: Optional[Subscription] = None
    try:
        subscription = await bus.subscribe(db)
        while True:
            if await request.is_disconnected():
                break
            try:
                payload = await asyncio.wait_for(subscription.get(), timeout=keepalive_seconds)
                yield format_sse(payload)
            except asyncio.TimeoutError:
                yield keepalive_message()
    finally:
        if subscription is not None:
            bus.unsubscribe(subscription)


@router.get("")
async def stream_updates(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    bus: ChangeNotificationBus = Depends(get_notification_bus),
) -> StreamingResponse:
    """Server-sent events: current item count now, then again after every change."""
    return StreamingResponse(
        _event_generator(request, bus, db, settings.sse_keepalive_seconds),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        },
    )
