"""Database connection and session management."""

from dataclasses import dataclass
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from loss_reports.config import Settings
from loss_reports.utils.logger import get_logger

log = get_logger(__name__)


# Base class for all models
class Base(DeclarativeBase):
    pass


@dataclass(frozen=True)
class StoreConfig:
    """Connection parameters for the report store, built once at startup."""

    database_url: str
    echo: bool = False
    pool_recycle: int = 1800

    @classmethod
    def from_settings(cls, settings: Settings) -> "StoreConfig":
        return cls(
            database_url=settings.database_url,
            echo=settings.sql_echo,
            pool_recycle=settings.db_pool_recycle_seconds,
        )

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


class Database:
    """Owns the async engine and session factory for one process."""

    def __init__(self, config: StoreConfig):
        self.config = config
        engine_kwargs = {"echo": config.echo, "pool_pre_ping": True}
        if not config.is_sqlite:
            engine_kwargs["pool_recycle"] = config.pool_recycle
        self.engine: AsyncEngine = create_async_engine(config.database_url, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def init(self) -> None:
        """Create tables if they do not exist yet."""
        # Model registration happens on import.
        from loss_reports import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        log.info("database initialized", dialect=self.engine.dialect.name)

    async def ping(self) -> None:
        """Run a trivial query; raises if the store is unreachable."""
        async with self.session_factory() as session:
            await session.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        await self.engine.dispose()
        log.info("database connections closed")


def get_database(request: Request) -> Database:
    """Get the process-wide Database from app state."""
    return request.app.state.database


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting database sessions."""
    database = get_database(request)
    async with database.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
