import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from users_api.db.base import Base

logger = logging.getLogger(__name__)


def _engine_options(database_url: str) -> dict:
    # sqlite usa un pool sin tamaño configurable
    if database_url.startswith("sqlite"):
        return {}
    return {"pool_size": 5, "max_overflow": 10}


class Database:
    """Handle del store: engine + fábrica de sesiones, con ciclo de vida explícito."""

    def __init__(self, database_url: str):
        self.database_url = database_url
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database is not connected")
        return self._engine

    async def connect(self) -> None:
        if self._engine is not None:
            return
        self._engine = create_async_engine(self.database_url, **_engine_options(self.database_url))
        self._sessionmaker = async_sessionmaker(self._engine, expire_on_commit=False, class_=AsyncSession)
        logger.info("Database engine created for %s", self._engine.url.render_as_string(hide_password=True))

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables verified/created.")

    async def disconnect(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        logger.info("Database engine disposed.")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        if self._sessionmaker is None:
            raise RuntimeError("Database is not connected")
        async with self._sessionmaker() as session:
            yield session
