"""Async database manager for Device Hub."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from device_hub.common.config import DeviceHubSettings, get_settings
from device_hub.common.models import Base

# Import all model modules so Base.metadata is complete for create_all().
import device_hub.identity.models  # noqa: F401
import device_hub.devices.models  # noqa: F401
import device_hub.audit.models  # noqa: F401


class DatabaseManager:
    """Owns the async engine and its bounded connection pool.

    One instance per process: ``init()`` at startup, ``close()`` at shutdown.
    Every ``get_session()`` block is one transaction.
    """

    def __init__(self, settings: DeviceHubSettings | None = None):
        self._settings = settings or get_settings()
        self.engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    async def init(self) -> None:
        url = self._settings.db_url
        kwargs = {}
        if not self._settings.is_sqlite:
            kwargs = {
                "pool_size": self._settings.db_pool_size,
                "pool_timeout": self._settings.db_pool_timeout,
                "pool_pre_ping": True,
            }
        self.engine = create_async_engine(url, echo=False, **kwargs)
        self._session_factory = async_sessionmaker(
            self.engine, expire_on_commit=False
        )

    @property
    def dialect(self) -> str:
        if self.engine is None:
            raise RuntimeError("DatabaseManager not initialized, call init() first")
        return self.engine.dialect.name

    async def ping(self) -> None:
        """Open one connection and run a trivial query. Raises on failure."""
        if self.engine is None:
            raise RuntimeError("DatabaseManager not initialized, call init() first")
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        if self._session_factory is None:
            raise RuntimeError("DatabaseManager not initialized, call init() first")
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_all(self) -> None:
        if self.engine is None:
            raise RuntimeError("DatabaseManager not initialized, call init() first")
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        if self.engine is None:
            raise RuntimeError("DatabaseManager not initialized, call init() first")
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def close(self) -> None:
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self._session_factory = None
