# src/sitecms/core/db.py
import logging
from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from src.sitecms.core.config import Settings, async_retry

logger = logging.getLogger(__name__)


class Database:
    """Engine plus session factory, built once per application."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory = async_sessionmaker(
            bind=engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        if not settings.ASYNC_DATABASE_URI:
            raise RuntimeError("ASYNC_DATABASE_URI is not set")
        engine = create_async_engine(
            str(settings.ASYNC_DATABASE_URI),
            echo=False,
            pool_size=settings.POOL_SIZE,
            max_overflow=5,
            pool_timeout=30,
            pool_recycle=1800,
            pool_pre_ping=True,
        )
        logger.info("Async engine created (pool_size=%d)", settings.POOL_SIZE)
        return cls(engine)

    @async_retry(max_attempts=4, base_delay=0.5, max_delay=3.0)
    async def ping(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def create_all(self) -> None:
        # registers the tables on SQLModel.metadata
        from src.sitecms.models.admin import Admin  # noqa: F401
        from src.sitecms.models.content import Content  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        logger.info("Database tables ready")

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database engine disposed")


# Session Provider
async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    database: Optional[Database] = getattr(request.app.state, "database", None)
    if database is None:
        raise RuntimeError("Database is not initialized")
    async with database.session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
