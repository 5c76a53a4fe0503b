from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import require_username
from core.log import log_api_request
from db.database import get_async_session
from schemas.inventory import InventoryReport
from services.queries import build_report

router = APIRouter()


@router.get("", response_model=InventoryReport)
async def get_report(
    request: Request,
    username: str = Depends(require_username),
    db: AsyncSession = Depends(get_async_session),
):
    """Stock value (quantity x purchase price) and unit totals, with every row."""
    log_api_request(request, "Fetching report data")
    return await build_report(db)
