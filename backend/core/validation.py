import math
from typing import Any, Dict, List

TEXT_FIELDS = ("part_number", "name", "description", "location")
PRICE_FIELDS = ("purchase_price", "sale_price")
STOCK_COUNT_NOW = "now"

# SQLite INTEGER is a signed 64-bit value; larger Python ints cannot be bound
SQLITE_INT_MIN = -(2**63)
SQLITE_INT_MAX = 2**63 - 1


def _is_number(v: Any) -> bool:
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return False
    if isinstance(v, int):
        return SQLITE_INT_MIN <= v <= SQLITE_INT_MAX
    return True


def normalize_inventory_payload(body: Dict[str, Any], include_stock_count: bool = False) -> Dict[str, Any]:
    """
    Fill in defaults for fields the client left out.

    Present values are passed through untouched so validation can reject
    wrong types instead of silently coercing them.
    """
    data: Dict[str, Any] = {}
    for field in TEXT_FIELDS:
        data[field] = body[field] if field in body else ""
    for field in PRICE_FIELDS:
        data[field] = body[field] if field in body else 0.0
    quantity = body["quantity"] if "quantity" in body else 0
    if isinstance(quantity, float) and quantity.is_integer():
        quantity = int(quantity)
    data["quantity"] = quantity
    if include_stock_count:
        data["last_stock_count"] = body.get("last_stock_count")
    return data


def validate_inventory_data(data: Dict[str, Any]) -> List[str]:
    errors: List[str] = []

    for field in ("part_number", "name", "description"):
        if data.get(field) is not None and not isinstance(data[field], str):
            errors.append(f"Invalid {field}")
    if data.get("location") and not isinstance(data["location"], str):
        errors.append("Invalid location")

    for field in PRICE_FIELDS:
        v = data.get(field)
        if not _is_number(v) or math.isnan(v):
            errors.append(f"Invalid {field}")

    q = data.get("quantity")
    if (
        not _is_number(q)
        or (isinstance(q, float) and not q.is_integer())
        or not SQLITE_INT_MIN <= q <= SQLITE_INT_MAX
    ):
        errors.append("Invalid quantity")

    return errors


def validate_id(raw_id: Any) -> bool:
    """True only for a positive whole number, e.g. 5 or "5" (not "1.5", "0", "abc")."""
    if isinstance(raw_id, bool):
        return False
    if isinstance(raw_id, float):
        if not raw_id.is_integer():
            return False
        raw_id = int(raw_id)
    if not isinstance(raw_id, int):
        try:
            raw_id = int(str(raw_id).strip())
        except (TypeError, ValueError):
            return False
    return 0 < raw_id <= SQLITE_INT_MAX
