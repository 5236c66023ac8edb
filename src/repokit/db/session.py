"""Engine and session factory construction with transaction utilities.

This module provides:
- Async engine creation from Settings
- AsyncSession factory used by the repositories
- A transaction context manager used by the auto-committing write path
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from repokit.core.config import Settings, settings

logger = logging.getLogger(__name__)


def build_engine(config: Settings | None = None, **overrides: Any) -> AsyncEngine:
    """Create an async engine from settings.

    Pool sizing options are only passed for server databases; SQLite uses
    SQLAlchemy's default pool for its driver.

    Args:
        config: Settings to read from (defaults to the module-level settings)
        **overrides: Extra keyword arguments for create_async_engine

    Returns:
        AsyncEngine bound to config.DATABASE_URL

    Example:
        >>> engine = build_engine(Settings(DATABASE_URL="sqlite+aiosqlite:///:memory:"))
    """
    config = config or settings
    options: dict[str, Any] = {"echo": config.DB_ECHO}
    if not config.is_sqlite:
        options.update(
            pool_size=config.DB_POOL_SIZE,
            max_overflow=config.DB_MAX_OVERFLOW,
            pool_timeout=config.DB_POOL_TIMEOUT,
            pool_recycle=config.DB_POOL_RECYCLE,
            pool_pre_ping=True,
        )
    options.update(overrides)
    return create_async_engine(config.DATABASE_URL, **options)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the session factory handed to repositories.

    Objects stay readable after commit so repositories can return them once
    their session is closed.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@asynccontextmanager
async def transactional(
    db: AsyncSession,
    *,
    commit: bool = True,
) -> AsyncGenerator[AsyncSession, None]:
    """Explicit transaction context manager with automatic commit/rollback.

    Commits on success or rolls back on exception, re-raising the original
    error. Write repositories run every statement that is not bound to a
    caller-owned Transaction inside this context.

    Args:
        db: The database session
        commit: Whether to commit on success (default: True)

    Yields:
        AsyncSession: The database session

    Raises:
        Exception: Re-raises any exception after rollback

    Example:
        ```python
        async with session_factory() as session:
            async with transactional(session):
                session.add(Person(name="Ann", age=30))
        ```
    """
    try:
        yield db
        if commit:
            await db.commit()
            logger.debug("Transaction committed successfully")
    except Exception as e:
        await db.rollback()
        logger.error(f"Transaction rolled back due to error: {type(e).__name__}: {e}")
        raise
