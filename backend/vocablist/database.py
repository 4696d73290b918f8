"""
VocabList Backend - Database Engine & Session Management
==========================================================

What:  Async SQLAlchemy engine, session factory and declarative base.
How:   Creates an async engine with connection pooling. The document store
       (services/sql_document_store.py) opens one short-lived session per
       round trip from `async_session_factory`.
When:  Engine is created at module import; sessions are created per store call.

Connection Pooling Strategy:
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for traffic spikes (total max = 30)
    pool_pre_ping:     Validates connections before use
    pool_recycle=3600: Recycles connections every hour

    SQLite URLs (tests, local development) skip the pool sizing options.
"""

from typing import Any, Dict

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from vocablist.config import settings


def _engine_options(url: str) -> Dict[str, Any]:
    """Pool options for server databases; SQLite manages its own pool."""
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if url.startswith("sqlite"):
        return options
    options.update(
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
    )
    return options


def build_engine(url: str) -> AsyncEngine:
    """Create an async engine for the given URL with the configured pool options."""
    return create_async_engine(url, **_engine_options(url))


# ── Engine & Session Factory ──────────────────────────────────────────────
engine = build_engine(settings.database_url)

# expire_on_commit=False: rows read inside a session stay usable after commit
async_session_factory = async_sessionmaker(
    engine,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object used by Alembic and by
    `create_all` in the test suite.
    """
    pass


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine() -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    await engine.dispose()
