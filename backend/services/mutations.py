"""
Create / update / delete for inventory rows.

Each mutation runs: identity check -> validation -> prior-state read ->
write -> audit -> commit -> broadcast. The row write and its audit entry
commit together; if either fails nothing is kept and the caller gets an
InternalError. Broadcasting happens after the commit and cannot fail the
request.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import require_username
from core.errors import InternalError, NotFoundError, ValidationError
from core.notifications import ChangeNotificationBus
from core.validation import (
    STOCK_COUNT_NOW,
    normalize_inventory_payload,
    validate_id,
    validate_inventory_data,
)
from db.inventory.item import InventoryItem as InventoryItemModel
from services.audit import record_audit_event

logger = logging.getLogger("stocklist.mutations")


def _now() -> datetime:
    # Naive UTC, the same form SQLite hands DATETIME values back in
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _parse_id(raw_id: Any) -> int:
    if not validate_id(raw_id):
        raise ValidationError(["Invalid ID format"])
    if isinstance(raw_id, (int, float)):
        return int(raw_id)
    return int(str(raw_id).strip())


def _validated(body: Any, include_stock_count: bool = False) -> Dict[str, Any]:
    if not isinstance(body, dict):
        raise ValidationError(["Request body must be a JSON object"])
    data = normalize_inventory_payload(body, include_stock_count=include_stock_count)
    errors = validate_inventory_data(data)
    if errors:
        raise ValidationError(errors)
    return data


async def _get_item(db: AsyncSession, item_id: int) -> Optional[InventoryItemModel]:
    res = await db.execute(select(InventoryItemModel).where(InventoryItemModel.id == item_id))
    return res.scalar_one_or_none()


async def _rollback_and_raise(db: AsyncSession, exc: SQLAlchemyError, operation: str, **context) -> None:
    await db.rollback()
    logger.error(
        f"{operation} failed",
        extra={"operation": operation, "error": repr(exc), **context},
        exc_info=exc,
    )
    raise InternalError(exc) from exc


async def create_item(
    db: AsyncSession,
    bus: ChangeNotificationBus,
    username: Optional[str],
    body: Any,
) -> Dict[str, int]:
    username = require_username(username)
    data = _validated(body)
    now = _now()

    try:
        model = InventoryItemModel(**data, last_modified=now)
        db.add(model)
        await db.flush()
        new_id = model.id
        await record_audit_event(
            db,
            username=username,
            action="CREATE",
            old_value=None,
            new_value=model.to_schema,
            timestamp=now,
        )
        await db.commit()
    except SQLAlchemyError as exc:
        await _rollback_and_raise(db, exc, "create_item", username=username)

    await bus.broadcast(db)
    return {"id": new_id}


async def update_item(
    db: AsyncSession,
    bus: ChangeNotificationBus,
    username: Optional[str],
    raw_id: Any,
    body: Any,
) -> Dict[str, bool]:
    username = require_username(username)
    item_id = _parse_id(raw_id)
    data = _validated(body, include_stock_count=True)
    confirm_stock_count = data.pop("last_stock_count", None) == STOCK_COUNT_NOW
    now = _now()

    try:
        current = await _get_item(db, item_id)
        if current is None:
            raise NotFoundError()
        old_value = current.to_schema

        values = {**data, "last_modified": now}
        if confirm_stock_count:
            values["last_stock_count"] = now
        result = await db.execute(
            update(InventoryItemModel)
            .where(InventoryItemModel.id == item_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            # Row vanished between the read and the write
            await db.rollback()
            raise NotFoundError()

        await db.refresh(current)
        await record_audit_event(
            db,
            username=username,
            action="UPDATE",
            old_value=old_value,
            new_value=current.to_schema,
            timestamp=now,
        )
        await db.commit()
    except SQLAlchemyError as exc:
        await _rollback_and_raise(db, exc, "update_item", username=username, itemId=item_id)

    await bus.broadcast(db)
    return {"success": True}


async def delete_item(
    db: AsyncSession,
    bus: ChangeNotificationBus,
    username: Optional[str],
    raw_id: Any,
) -> Dict[str, bool]:
    username = require_username(username)
    item_id = _parse_id(raw_id)
    now = _now()

    try:
        current = await _get_item(db, item_id)
        if current is None:
            raise NotFoundError()
        old_value = current.to_schema

        result = await db.execute(
            delete(InventoryItemModel)
            .where(InventoryItemModel.id == item_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await db.rollback()
            raise NotFoundError()

        await record_audit_event(
            db,
            username=username,
            action="DELETE",
            old_value=old_value,
            new_value=None,
            timestamp=now,
        )
        await db.commit()
    except SQLAlchemyError as exc:
        await _rollback_and_raise(db, exc, "delete_item", username=username, itemId=item_id)

    await bus.broadcast(db)
    return {"success": True}
