from collections.abc import AsyncGenerator
from pathlib import Path

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from core.config import settings


class Base(DeclarativeBase):
    pass


def build_engine(database_url: str, echo: bool = False):
    url = make_url(database_url)
    kwargs = {"echo": echo}
    if url.get_backend_name() == "sqlite" and url.database not in (None, "", ":memory:"):
        # aiosqlite connections are cheap; a fresh one per checkout keeps them
        # off whichever event loop opened them first.
        kwargs["poolclass"] = NullPool
    return create_async_engine(database_url, **kwargs)


def ensure_sqlite_directory(database_url: str) -> None:
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database not in (None, "", ":memory:"):
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)


engine = build_engine(settings.database_url, echo=settings.database_echo)
async_session_maker = async_sessionmaker(engine, expire_on_commit=False)


async def create_db_and_tables():
    # Register models on Base.metadata
    from db.inventory.item import InventoryItem  # noqa: F401
    from db.audit import AuditLog  # noqa: F401

    ensure_sqlite_directory(settings.database_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        yield session
