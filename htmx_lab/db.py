from __future__ import annotations
from typing import AsyncGenerator
from sqlmodel import SQLModel
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from htmx_lab.config import load_config

DB_URL = load_config().db_url
# aiosqlite connections are bound to the loop that opened them
engine = create_async_engine(DB_URL, echo=False, future=True,
                             poolclass=NullPool if DB_URL.startswith("sqlite") else None)
AsyncSessionLocal = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

async def init_db() -> None:
    # table classes must be imported before create_all
    import htmx_lab.models  # noqa: F401
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session
