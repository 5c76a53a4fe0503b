from __future__ import annotations

import asyncio
import os
import tempfile

import pytest

# Configure a disposable database and quiet logging before importing the app.
# The app-level engine is never used by the tests; each test gets its own.
_TMP_DIR = tempfile.mkdtemp(prefix="stocklist-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR}/app.db"
os.environ["LOG_DIR"] = ""
os.environ["CSV_IMPORT_PATH"] = ""

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker  # noqa: E402

from core.notifications import ChangeNotificationBus  # noqa: E402
from db.audit import AuditLog  # noqa: E402,F401
from db.database import Base, build_engine, get_async_session  # noqa: E402
from db.inventory.item import InventoryItem  # noqa: E402,F401
from main import app  # noqa: E402
from services.queries import count_inventory_items  # noqa: E402


async def _create_all(engine):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture()
def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'inventory.db'}")
    asyncio.run(_create_all(engine))
    try:
        yield engine
    finally:
        asyncio.run(engine.dispose())


@pytest.fixture()
def session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture()
def bus():
    return ChangeNotificationBus(count_inventory_items)


@pytest.fixture()
def client(session_maker, bus):
    async def _override_session():
        async with session_maker() as session:
            yield session

    previous_bus = app.state.notifications
    app.dependency_overrides[get_async_session] = _override_session
    app.state.notifications = bus
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        app.state.notifications = previous_bus


WIDGET = {
    "part_number": "A1",
    "name": "Widget",
    "purchase_price": 2.5,
    "sale_price": 5,
    "quantity": 10,
}


@pytest.fixture()
def widget():
    return dict(WIDGET)
