"""Database engine and session management."""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from secure_app.db.base import Base


class Database:
    """Own the connection pool for the lifetime of the process.

    Built once at startup and disposed at shutdown. Connections are checked
    out per session and returned when the session closes.
    """

    def __init__(self, url: str, *, pool_size: int = 10, echo: bool = False) -> None:
        engine_kwargs: dict[str, Any] = {}
        if not url.startswith("sqlite"):
            # Bounded pool; extra callers wait for a free connection.
            engine_kwargs.update(pool_size=pool_size, max_overflow=0, pool_pre_ping=True)
        self.engine = create_async_engine(url, future=True, echo=echo, **engine_kwargs)
        self.session_factory = async_sessionmaker(self.engine, expire_on_commit=False, class_=AsyncSession)

    async def create_all(self) -> None:
        # Import registers the models on Base.metadata.
        from secure_app import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Provide a transactional scope around a series of operations."""

        async with self.session_factory() as session:
            try:
                yield session
            finally:
                await session.close()

    async def dispose(self) -> None:
        await self.engine.dispose()
