from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from ..core.config import Settings
from .models import Base


class Database:
    """Async engine plus session factory, built once per process."""

    def __init__(self, settings: Settings):
        url = settings.DATABASE_URL
        if url.startswith("sqlite"):
            # SQLite for local development and tests; one connection per session
            self.engine: AsyncEngine = create_async_engine(
                url,
                poolclass=NullPool,
                connect_args={"timeout": 30},
                echo=settings.DB_ECHO,
            )
        else:
            # PostgreSQL (asyncpg) for production
            self.engine = create_async_engine(
                url,
                pool_pre_ping=True,
                pool_recycle=300,
                pool_size=settings.DB_POOL_SIZE,
                max_overflow=settings.DB_MAX_OVERFLOW,
                echo=settings.DB_ECHO,
            )

        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            autoflush=False,
            expire_on_commit=False,
        )

    async def create_all(self) -> None:
        """Create tables directly (local development and tests only)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()

    async def session(self) -> AsyncIterator[AsyncSession]:
        """Dependency to get database session."""
        async with self.session_factory() as db:
            yield db
