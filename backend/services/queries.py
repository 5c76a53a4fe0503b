import math
from typing import Any, Dict, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.errors import ValidationError
from core.log import log_db_operation
from core.validation import SQLITE_INT_MAX
from db.inventory.item import InventoryItem as InventoryItemModel

# Only these may reach ORDER BY
SORTABLE_COLUMNS = (
    "part_number",
    "name",
    "description",
    "location",
    "purchase_price",
    "sale_price",
    "quantity",
)
SEARCHABLE_COLUMNS = ("part_number", "name", "description", "location")


def _positive_int(value: Any, default: int) -> int:
    try:
        n = int(value)
    except (TypeError, ValueError):
        return default
    return n if 0 < n <= SQLITE_INT_MAX else default


def parse_page_params(page: Any, items_per_page: Any) -> Tuple[int, int]:
    """Fall back to page 1 / the configured page size for anything unusable."""
    return (
        _positive_int(page, 1),
        _positive_int(items_per_page, settings.default_items_per_page),
    )


def page_offset(page: int, items_per_page: int) -> int:
    # Clamped so a far-out page still binds; it just matches no rows
    return min((page - 1) * items_per_page, SQLITE_INT_MAX)


def build_pagination(page: int, items_per_page: int, total: int) -> Dict[str, int]:
    return {
        "currentPage": page,
        "itemsPerPage": items_per_page,
        "totalItems": total,
        "totalPages": math.ceil(total / items_per_page),
    }


def _search_clause(search_query: str):
    pattern = f"%{search_query.lower()}%"
    return or_(
        *[func.lower(getattr(InventoryItemModel, col)).like(pattern) for col in SEARCHABLE_COLUMNS]
    )


async def list_inventory(
    db: AsyncSession,
    page: Any = 1,
    items_per_page: Any = None,
    search_query: Optional[str] = "",
    sort_by: Optional[str] = "part_number",
    sort_order: Optional[str] = "ASC",
) -> Dict[str, Any]:
    sort_by = sort_by or "part_number"
    if sort_by not in SORTABLE_COLUMNS:
        raise ValidationError(["Invalid sort column"])

    page, items_per_page = parse_page_params(page, items_per_page)
    offset = page_offset(page, items_per_page)
    search_query = (search_query or "").strip()
    descending = (sort_order or "ASC").strip().upper() == "DESC"

    count_stmt = select(func.count()).select_from(InventoryItemModel)
    stmt = select(InventoryItemModel)
    if search_query:
        clause = _search_clause(search_query)
        count_stmt = count_stmt.where(clause)
        stmt = stmt.where(clause)

    sort_col = getattr(InventoryItemModel, sort_by)
    stmt = (
        stmt.order_by(sort_col.desc() if descending else sort_col.asc(), InventoryItemModel.id.asc())
        .limit(items_per_page)
        .offset(offset)
    )

    total = (await db.execute(count_stmt)).scalar_one()
    items = (await db.execute(stmt)).scalars().all()

    log_db_operation(
        "query",
        query="list_inventory",
        page=page,
        itemsPerPage=items_per_page,
        searchQuery=search_query,
        sortBy=sort_by,
        sortOrder="DESC" if descending else "ASC",
        resultCount=len(items),
    )
    return {
        "items": [it.to_schema for it in items],
        "pagination": build_pagination(page, items_per_page, total),
    }


async def count_inventory_items(db: AsyncSession) -> int:
    res = await db.execute(select(func.count()).select_from(InventoryItemModel))
    return int(res.scalar_one())


async def build_report(db: AsyncSession) -> Dict[str, Any]:
    totals = (
        await db.execute(
            select(
                func.sum(InventoryItemModel.quantity * InventoryItemModel.purchase_price),
                func.sum(InventoryItemModel.quantity),
            )
        )
    ).one()
    res = await db.execute(
        select(InventoryItemModel).order_by(
            InventoryItemModel.location.asc(),
            InventoryItemModel.part_number.asc(),
            InventoryItemModel.id.asc(),
        )
    )
    items = res.scalars().all()
    return {
        "totalValue": float(totals[0] or 0),
        "totalItems": int(totals[1] or 0),
        "items": [it.to_schema for it in items],
    }
