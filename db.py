from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator
import logging

from sqlalchemy import event, Engine, Result, CursorResult
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession, AsyncEngine

import config
from models.base import Base
"""
Imports of these models are needed to correctly create tables in the database.
For more information see https://stackoverflow.com/questions/7478403/sqlalchemy-classes-across-files
"""
from models.user import User
from models.product import Product
from models.order import Order
from models.orderItem import OrderItem
from models.payment import Payment
from models.invoice import Invoice
from models.shipping_label import ShippingLabel

logger = logging.getLogger(__name__)

# HARD DISABLE SQL echo - SQL statements would clutter the order audit logs
sql_echo = False

engine: AsyncEngine | None = None
session_maker: async_sessionmaker[AsyncSession] | None = None


def configure_engine(url: str) -> AsyncEngine:
    """
    (Re)bind the module-level engine and session factory.

    Called once at import with config.DB_URL. Tests call it again to point
    the application at a temporary database.
    """
    global engine, session_maker

    connect_args = {}
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite":
        # Concurrent writers wait for the lock instead of failing immediately
        connect_args["timeout"] = config.DB_BUSY_TIMEOUT_SECONDS
        if parsed.database and parsed.database != ":memory:":
            Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_async_engine(url, echo=sql_echo, connect_args=connect_args)
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    return engine


configure_engine(config.DB_URL)


@asynccontextmanager
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        try:
            yield session
        finally:
            await session.close()


async def session_execute(stmt, session: AsyncSession, params: dict | None = None) -> Result[Any] | CursorResult[Any]:
    if params is None:
        return await session.execute(stmt)
    return await session.execute(stmt, params)


async def session_flush(session: AsyncSession) -> None:
    await session.flush()


async def session_commit(session: AsyncSession) -> None:
    await session.commit()


async def session_rollback(session: AsyncSession) -> None:
    await session.rollback()


@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    # Only SQLite understands the pragma; other backends enforce FKs natively
    if "sqlite" not in type(dbapi_connection).__module__.lower():
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


async def create_db_and_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"Database schema ready ({engine.url.render_as_string(hide_password=True)})")
