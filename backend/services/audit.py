import json
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import AuthRequiredError
from core.log import log_db_operation
from db.audit import AUDIT_ACTIONS, AuditLog as AuditLogModel
from services.queries import build_pagination, page_offset, parse_page_params


def _dump(value: Optional[Dict[str, Any]]) -> Optional[str]:
    if value is None:
        return None
    return json.dumps(value, default=str)


def _load(raw: Optional[str]) -> Optional[Dict[str, Any]]:
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        # Keep unreadable snapshots visible rather than hiding the entry
        return {"raw": raw}


async def record_audit_event(
    db: AsyncSession,
    *,
    username: str,
    action: str,
    old_value: Optional[Dict[str, Any]],
    new_value: Optional[Dict[str, Any]],
    timestamp: Optional[datetime] = None,
) -> AuditLogModel:
    """
    Append one audit entry inside the caller's transaction.

    Flushes so a failing insert raises here and the caller can roll back the
    row write with it. Committing is the caller's job.
    """
    if not username:
        raise AuthRequiredError()
    if action not in AUDIT_ACTIONS:
        raise ValueError(f"Unknown audit action: {action}")

    entry = AuditLogModel(
        username=username,
        action=action,
        old_value=_dump(old_value),
        new_value=_dump(new_value),
    )
    if timestamp is not None:
        entry.timestamp = timestamp
    db.add(entry)
    await db.flush()

    log_db_operation("audit", username=username, action=action, oldValue=old_value, newValue=new_value)
    return entry


def _describe(entry: AuditLogModel) -> Dict[str, Any]:
    old_value = _load(entry.old_value)
    new_value = _load(entry.new_value)

    if entry.action == "DELETE":
        source = old_value or {}
        value_content = old_value
    elif entry.action == "CREATE":
        source = new_value or {}
        value_content = new_value
    else:
        source = new_value or old_value or {}
        value_content = {"old": old_value, "new": new_value}

    return {
        "id": entry.id,
        "username": entry.username,
        "action": entry.action,
        "old_value": old_value,
        "new_value": new_value,
        "timestamp": entry.timestamp.isoformat() if entry.timestamp else None,
        "item_name": source.get("name"),
        "item_part_number": source.get("part_number"),
        "value_content": value_content,
    }


async def list_audit_log(db: AsyncSession, page: Any = 1, items_per_page: Any = None) -> Dict[str, Any]:
    """Newest entries first, each with the item name/part number pulled from its snapshots."""
    page, items_per_page = parse_page_params(page, items_per_page)
    offset = page_offset(page, items_per_page)

    total = (await db.execute(select(func.count()).select_from(AuditLogModel))).scalar_one()
    res = await db.execute(
        select(AuditLogModel)
        .order_by(AuditLogModel.timestamp.desc(), AuditLogModel.id.desc())
        .limit(items_per_page)
        .offset(offset)
    )
    logs = [_describe(e) for e in res.scalars().all()]
    return {"logs": logs, "pagination": build_pagination(page, items_per_page, total)}
