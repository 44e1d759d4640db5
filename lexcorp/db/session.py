"""
db/session.py
-------------
Async SQLAlchemy engine and session factory.

  - AsyncEngine with asyncpg driver for non-blocking I/O.
  - Pool sized for typical SaaS workloads (10 + 20 overflow); pool options
    are skipped for SQLite URLs, which use their own pool classes.
  - pool_pre_ping=True: validates connections before checkout.
  - expire_on_commit=False: attributes stay loaded after commit, so route
    handlers can serialise ORM objects without an implicit SELECT.
"""

from typing import Any, Dict

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from lexcorp.core.config import settings


def _engine_options(url: str) -> Dict[str, Any]:
    options: Dict[str, Any] = {"echo": settings.DEBUG, "pool_pre_ping": True}
    if not url.startswith("sqlite"):
        options.update(pool_size=10, max_overflow=20, pool_recycle=3600)
    return options


# ── Engine ────────────────────────────────────────────────────────────────────
engine = create_async_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

# ── Session Factory ───────────────────────────────────────────────────────────
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncSession:  # type: ignore[return]
    """
    FastAPI dependency that yields a database session.
    Committed when the request handler succeeds, rolled back on exceptions.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_models(bind: AsyncEngine = engine) -> None:
    """Create all tables. For production schemas use migrations instead."""
    from lexcorp.models import Base  # Imports all models so metadata is populated

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
