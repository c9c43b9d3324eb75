"""
Blog Posts API: Database Connection Management
===============================================

What:  The `Database` handle (async engine + session factory), the ORM base
       class, and the FastAPI session dependency.
How:   A `Database` is constructed explicitly by whoever owns the process
       (the server lifecycle, or a test fixture) and attached to
       `app.state.database`. Request handlers receive a session through
       `get_db_session`, which commits on success and rolls back on error.
When:  One `Database` per running app; one session per request.

Connection Pooling:
    PostgreSQL URLs use pool_size/max_overflow/pre_ping from settings.
    SQLite URLs get SQLAlchemy's default pool for the driver, since the
    queue pool arguments do not apply to it.
"""

import logging
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from blog_api.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models (shared metadata for Alembic)."""
    pass


class Database:
    """
    Owns the connection to the blog post store.

    Lifecycle:
        Database(url)  → engine created lazily by SQLAlchemy, nothing connected yet
        await connect() → verifies the store answers (SELECT 1)
        await dispose() → closes every pooled connection

    Usage:
        database = Database.from_settings(settings)
        await database.connect()
        async with database.session() as session:
            ...
        await database.dispose()
    """

    def __init__(self, url: str, **engine_kwargs: Any):
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        # expire_on_commit=False keeps attributes readable after commit
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "Database":
        config = config or default_settings
        engine_kwargs: Dict[str, Any] = {
            "echo": config.log_level == "DEBUG",
        }
        if not config.is_sqlite:
            engine_kwargs.update(
                pool_size=config.db_pool_size,
                max_overflow=config.db_max_overflow,
                pool_pre_ping=config.db_pool_pre_ping,
                pool_recycle=3600,
            )
        return cls(config.database_url, **engine_kwargs)

    def session(self) -> AsyncSession:
        return self.session_factory()

    async def connect(self) -> None:
        """Open one connection and run a trivial query; raises if the store is unreachable."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Connected to database: %s", self.engine.url.render_as_string(hide_password=True))

    async def ping(self) -> bool:
        """Health probe. Returns False instead of raising."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.warning("Database ping failed: %s", str(e))
            return False
        return True

    async def create_all(self) -> None:
        """Create every table registered on `Base.metadata` (dev and test setups)."""
        # Models must be imported so they register with Base
        from blog_api.models import blog_post  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Gracefully close all connections in the pool."""
        await self.engine.dispose()
        logger.info("Database connections closed")


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Opens a session from the app's Database
        2. Yields it to the route handler
        3. On error: rolls back and re-raises for the global error handler
        4. Always: closes the session (returns connection to pool)

    Commits are issued by the service before the handler returns. Code after
    `yield` may run once the response is already sent, so it only cleans up.

    Example usage in a route:
        @router.get("/blog-posts")
        async def list_blog_posts(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
