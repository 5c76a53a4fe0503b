from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel

from schemas.inventory import PaginationRead

AuditAction = Literal["CREATE", "UPDATE", "DELETE"]


class AuditLogRead(BaseModel):
    id: int
    username: str
    action: AuditAction
    old_value: Optional[Dict[str, Any]] = None
    new_value: Optional[Dict[str, Any]] = None
    timestamp: Optional[str] = None

    # Derived from whichever snapshot describes the item for this action
    item_name: Optional[str] = None
    item_part_number: Optional[str] = None
    value_content: Optional[Dict[str, Any]] = None


class AuditLogPage(BaseModel):
    logs: List[AuditLogRead]
    pagination: PaginationRead
