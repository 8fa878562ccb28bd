"""Async database engine and session factory."""

from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from app.core.config import Settings
from app.core.errors import ConfigError


class Database:
    """Engine + session factory built from one Settings object.

    The engine is created on first use so a missing DATABASE_URL surfaces
    as a ConfigError on each request instead of killing the process.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._engine: AsyncEngine | None = None
        self._session_factory: sessionmaker | None = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            url = self._settings.database_url
            if not url:
                raise ConfigError()
            kwargs: dict = {"echo": False}
            if not url.startswith("sqlite"):
                kwargs.update(
                    pool_size=self._settings.db_pool_size,
                    max_overflow=self._settings.db_max_overflow,
                )
            self._engine = create_async_engine(url, **kwargs)
        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
        return self._session_factory

    async def create_all(self) -> None:
        """Create all tables. Use Alembic migrations in production."""
        import app.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields an async DB session."""
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        yield session
