import logging

from fastapi import APIRouter, Request

from core.log import client_ip, safe_extra
from schemas.logs import ClientLogRecord

router = APIRouter()

logger = logging.getLogger("stocklist.client")

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


@router.post("")
async def receive_client_log(record: ClientLogRecord, request: Request):
    """Fire-and-forget sink for presentation-layer log lines."""
    context = record.model_dump(exclude={"level", "message"})
    logger.log(
        _LEVELS[record.level],
        record.message or "Frontend log received",
        extra=safe_extra(
            {
                **context,
                "clientIP": client_ip(request),
                "userAgent": request.headers.get("user-agent"),
            }
        ),
    )
    return {"success": True}
