"""
config/database.py
Async SQLAlchemy engine, session factory, and base model.

The engine is the console's single shared handle to the backend store.
It is built lazily on first use and reused for the life of the process.
"""

from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings


_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


# ── Engine ────────────────────────────────────────────────────
def get_engine() -> AsyncEngine:
    """Create the engine on first call, return the same one afterwards."""
    global _engine
    if _engine is None:
        options = {"echo": settings.DEBUG}
        if not settings.DATABASE_URL.startswith("sqlite"):
            options.update(
                pool_size=settings.DATABASE_POOL_SIZE,
                max_overflow=settings.DATABASE_MAX_OVERFLOW,
                pool_timeout=settings.DATABASE_POOL_TIMEOUT,
                pool_pre_ping=True,      # Detect stale connections
                pool_recycle=3600,       # Recycle connections every hour
            )
        _engine = create_async_engine(settings.DATABASE_URL, **options)
    return _engine


# ── Session Factory ───────────────────────────────────────────
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            bind=get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,  # Don't expire after commit (async-safe)
            autoflush=False,
        )
    return _session_factory


# ── Base Model ────────────────────────────────────────────────
class Base(DeclarativeBase):
    """All ORM models inherit from this."""
    pass


# ── Dependency ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency: yields an async database session.
    Auto-commits on success, rolls back on error.

    Usage:
        @router.get("/users")
        async def list_users(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def ping_db() -> None:
    async with get_session_factory()() as session:
        await session.execute(text("SELECT 1"))


async def init_db() -> None:
    """
    Check the connection at startup. Tables are only created in DEBUG;
    elsewhere the schema belongs to the backend store.
    """
    await ping_db()
    if not settings.DEBUG:
        return

    # Register all models on Base.metadata
    import shared.models.models  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose engine. Run during app shutdown."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
