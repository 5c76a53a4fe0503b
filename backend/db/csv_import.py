import csv
from pathlib import Path
from typing import List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.log import log_system_event
from db.inventory.item import InventoryItem

# Column order of the stock-take spreadsheet export
CSV_COLUMNS = (
    "location",
    "part_number",
    "name",
    "quantity",
    "purchase_price",
    "sale_price",
    "description",
)


def _as_float(value: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _as_int(value: str) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def parse_csv_rows(text: str) -> List[dict]:
    reader = csv.reader(text.splitlines())
    next(reader, None)  # header

    rows = []
    for raw in reader:
        if not any(cell.strip() for cell in raw):
            continue
        cells = [cell.strip() for cell in raw] + [""] * len(CSV_COLUMNS)
        record = dict(zip(CSV_COLUMNS, cells))
        rows.append(
            {
                "location": record["location"],
                "part_number": record["part_number"],
                "name": record["name"].strip('"'),
                "description": record["description"],
                "quantity": _as_int(record["quantity"]),
                "purchase_price": _as_float(record["purchase_price"]),
                "sale_price": _as_float(record["sale_price"]),
            }
        )
    return rows


async def import_csv_data(db: AsyncSession, csv_path: str) -> int:
    """
    Seed the inventory table from a CSV export, only if the table is empty.

    Returns the number of rows inserted (0 when skipped).
    """
    existing = (await db.execute(select(func.count()).select_from(InventoryItem))).scalar_one()
    if existing > 0:
        log_system_event("Database already contains data, skipping import", rows=existing)
        return 0

    rows = parse_csv_rows(Path(csv_path).read_text(encoding="utf-8-sig"))
    try:
        db.add_all([InventoryItem(**row) for row in rows])
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    log_system_event("CSV data imported successfully", csvPath=str(csv_path), rows=len(rows))
    return len(rows)
