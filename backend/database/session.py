"""
Async database session management.
"""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from database.config import get_settings
from database.models import Base

logger = logging.getLogger(__name__)

# Global engine and session factory
_engine = None
_async_session_factory = None


def get_engine():
    """Get or create the async database engine."""
    global _engine
    if _engine is None:
        settings = get_settings()
        url = settings.database_url
        options = {}
        # SQLite uses its own pool without sizing options
        if not url.startswith("sqlite"):
            options.update(
                pool_size=settings.pool_size,
                max_overflow=settings.max_overflow,
                pool_timeout=settings.pool_timeout,
            )
        _engine = create_async_engine(
            url,
            echo=False,  # Set to True for SQL debugging
            **options,
        )
        logger.info(
            "Created database engine for %s",
            _engine.url.render_as_string(hide_password=True),
        )
    return _engine


def get_session_factory():
    """Get or create the async session factory."""
    global _async_session_factory
    if _async_session_factory is None:
        engine = get_engine()
        _async_session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _async_session_factory


# Convenience alias
def AsyncSessionLocal():
    """Create a new async session."""
    factory = get_session_factory()
    return factory()


async def init_db():
    """
    Initialize the database by creating all tables.

    This should be called at application startup.
    """
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready")


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting an async database session.

    Usage in FastAPI:
        @app.get("/items")
        async def get_items(session: AsyncSession = Depends(get_session)):
            ...
    """
    session = AsyncSessionLocal()
    try:
        yield session
    finally:
        await session.close()


async def reset_engine():
    """
    Dispose the engine and reset the session factory.

    Useful for testing when switching databases.
    """
    global _engine, _async_session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _async_session_factory = None
