"""
Scout Query Service — Local Store Engine Management
=====================================================

What:  Async SQLAlchemy engine factory and declarative base for the embedded
       SQLite analytics store.
How:   create_local_engine() builds an aiosqlite-backed async engine for a
       file path; init_local_store() creates the tables declared in
       scout.models (used for seeding dev stores and tests).
Who:   LocalStoreBackend owns one engine per QueryClient; tests and dev tooling
       call init_local_store().
When:  Engines are created when a client is built and disposed when it closes.
       Creating an engine does not open a connection.
"""

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase

MEMORY_STORE = ":memory:"


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models of the local store.

    All models inherit from this class so init_local_store() can create
    their tables from a single metadata object.
    """
    pass


def local_store_url(path: str) -> str:
    """
    Build the SQLAlchemy URL for an SQLite store path.

    Examples:
        "./dev.db"  → "sqlite+aiosqlite:///./dev.db"
        ":memory:"  → "sqlite+aiosqlite:///:memory:"
    """
    return f"sqlite+aiosqlite:///{path}"


def create_local_engine(path: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for the embedded store at `path`.

    Args:
        path: SQLite file path, or ":memory:" for a throwaway store.
        echo: Log every SQL statement (DEBUG tooling only).
    """
    return create_async_engine(
        local_store_url(path),
        echo=echo,
        # Validate pooled connections before use (file may be replaced under us)
        pool_pre_ping=True,
    )


async def init_local_store(engine: AsyncEngine) -> None:
    """
    Create all model tables in the store behind `engine` (idempotent).

    Importing scout.models.analytics registers the tables on Base.metadata.
    """
    from scout.models import analytics  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
