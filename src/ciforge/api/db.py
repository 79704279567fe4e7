from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from ..settings import DATABASE_URL

# aiosqlite connections are bound to the loop that opened them
_engine_kwargs = {"poolclass": NullPool} if DATABASE_URL.startswith("sqlite") else {"pool_pre_ping": True}

engine = create_async_engine(DATABASE_URL, **_engine_kwargs)
SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
