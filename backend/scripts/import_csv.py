import argparse
import asyncio
import sys
from pathlib import Path

"""
Seed the inventory table from a stock-take CSV export.

Skips the import when the table already holds rows.

  python scripts/import_csv.py Telleliste.csv
"""

# Allow running from repo root by ensuring `backend/` is on sys.path
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from core.config import settings  # noqa: E402
from core.log import setup_logging  # noqa: E402
from db.csv_import import import_csv_data  # noqa: E402
from db.database import async_session_maker, create_db_and_tables  # noqa: E402


async def run(csv_path: str) -> int:
    await create_db_and_tables()
    async with async_session_maker() as session:
        return await import_csv_data(session, csv_path)


def main() -> None:
    parser = argparse.ArgumentParser(description="Import inventory rows from a CSV file")
    parser.add_argument("csv_path", nargs="?", default="Telleliste.csv")
    args = parser.parse_args()

    if not Path(args.csv_path).exists():
        parser.error(f"CSV file not found: {args.csv_path}")

    setup_logging(settings.log_level, settings.log_dir)
    print(f"[import_csv] Importing {args.csv_path} into {settings.database_url}")
    inserted = asyncio.run(run(args.csv_path))
    print(f"[import_csv] inserted_rows={inserted}")


if __name__ == "__main__":
    main()
