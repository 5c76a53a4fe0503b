from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Header, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from core.log import log_api_request
from core.notifications import ChangeNotificationBus, get_notification_bus
from db.database import get_async_session
from schemas.inventory import InventoryCreated, InventoryPage, MutationResult
from services import mutations
from services.queries import list_inventory

router = APIRouter()


@router.get("", response_model=InventoryPage)
async def get_inventory(
    request: Request,
    page: Optional[str] = None,
    items_per_page: Optional[str] = Query(None, alias="itemsPerPage"),
    search_query: str = Query("", alias="searchQuery"),
    sort_by: str = Query("part_number", alias="sortBy"),
    sort_order: str = Query("asc", alias="sortOrder"),
    db: AsyncSession = Depends(get_async_session),
):
    """
    One page of inventory rows.

    - searchQuery matches part number, name, description or location.
    - sortBy must be a known column; anything else is a 400.
    """
    log_api_request(request, "Fetching inventory items")
    return await list_inventory(
        db,
        page=page,
        items_per_page=items_per_page,
        search_query=search_query,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.post("", response_model=InventoryCreated)
async def create_inventory_item(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    x_username: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_async_session),
    bus: ChangeNotificationBus = Depends(get_notification_bus),
):
    log_api_request(request, "Adding new inventory item", body=payload)
    return await mutations.create_item(db, bus, x_username, payload)


@router.put("/{item_id}", response_model=MutationResult)
async def update_inventory_item(
    request: Request,
    item_id: str,
    payload: Dict[str, Any] = Body(...),
    x_username: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_async_session),
    bus: ChangeNotificationBus = Depends(get_notification_bus),
):
    log_api_request(request, "Updating inventory item", itemId=item_id, body=payload)
    return await mutations.update_item(db, bus, x_username, item_id, payload)


@router.delete("/{item_id}", response_model=MutationResult)
async def delete_inventory_item(
    request: Request,
    item_id: str,
    x_username: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_async_session),
    bus: ChangeNotificationBus = Depends(get_notification_bus),
):
    log_api_request(request, "Deleting inventory item", itemId=item_id)
    return await mutations.delete_item(db, bus, x_username, item_id)
