from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from core.log import log_api_request
from db.database import get_async_session
from schemas.audit import AuditLogPage
from services.audit import list_audit_log

router = APIRouter()


@router.get("", response_model=AuditLogPage)
async def get_audit_logs(
    request: Request,
    page: Optional[str] = None,
    items_per_page: Optional[str] = Query(None, alias="itemsPerPage"),
    db: AsyncSession = Depends(get_async_session),
):
    """Audit trail, newest first."""
    log_api_request(request, "Fetching audit logs", page=page, itemsPerPage=items_per_page)
    return await list_audit_log(db, page=page, items_per_page=items_per_page)
