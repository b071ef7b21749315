# cancelflow/db.py
from __future__ import annotations

from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from cancelflow.config import settings


# === 1. Engine ===
# DSN example: postgresql+asyncpg://app:app@db:5432/cancelflow
def make_engine(url: str, *, echo: bool = False) -> AsyncEngine:
    return create_async_engine(url, echo=echo, pool_pre_ping=True)


def make_sessionmaker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=bind, class_=AsyncSession, expire_on_commit=False)


engine = make_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)


# === 2. Sessions ===
SessionLocal = make_sessionmaker(engine)


# === 3. Dependency for FastAPI and scripts ===
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """One AsyncSession per request."""
    async with SessionLocal() as session:
        yield session
