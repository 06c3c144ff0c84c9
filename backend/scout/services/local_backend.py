"""
Scout Query Service — Local Store Backend
===========================================

What:  Execution strategy for queries targeted at the embedded SQLite store.
How:   Runs the query text through an async SQLAlchemy engine (aiosqlite
       driver) with exec_driver_sql(), so `parameters` bind positionally to
       `?` placeholders exactly as given. Each call runs in its own
       transaction on a pooled connection. BLOB values come back as
       base64 text so rows serialize to JSON unchanged.
Who:   Selected by QueryClient for QueryTarget.LOCAL.

Failure handling:
    store file missing        → LocalExecutionFailure("local store not found at ...")
    SQL / driver / I/O error  → LocalExecutionFailure(<driver message>)
    Never retried: the same statement against the same store fails the same way.
"""

import base64
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from scout.database import MEMORY_STORE, create_local_engine
from scout.exceptions import LocalExecutionFailure
from scout.schemas.query import ValidatedQuery
from scout.services.backend_base import BackendOutcome, QueryBackend

logger = logging.getLogger(__name__)


def _unique_columns(keys: List[str]) -> List[str]:
    # SELECT a, a ... reports the name twice; rows (dicts) keep the last value
    return list(dict.fromkeys(keys))


def _json_safe(value: Any) -> Any:
    # BLOB columns come back as bytes; rows must stay JSON-serializable
    if isinstance(value, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(value)).decode("ascii")
    return value


def _driver_message(exc: Exception) -> str:
    """Prefer the DBAPI's own message over SQLAlchemy's wrapped repr."""
    orig = getattr(exc, "orig", None)
    if orig is not None:
        return f"{type(orig).__name__}: {orig}"
    return f"{type(exc).__name__}: {exc}"


class LocalStoreBackend(QueryBackend):
    """
    Embedded-store execution strategy.

    Args:
        store_path: SQLite file path (":memory:" for a throwaway store).
        engine:     Pre-built engine to use instead of creating one (tests).
    """

    name = "local"

    def __init__(self, store_path: str, engine: Optional[AsyncEngine] = None):
        self.store_path = store_path
        self.engine = engine or create_local_engine(store_path)

    def _ensure_store_exists(self) -> None:
        # SQLite would silently create an empty file at a wrong path
        if self.store_path == MEMORY_STORE:
            return
        if not Path(self.store_path).is_file():
            raise LocalExecutionFailure(
                f"local store not found at '{self.store_path}'",
                context={"store_path": self.store_path},
            )

    async def execute(self, query: ValidatedQuery) -> BackendOutcome:
        """
        Run the query against the local store.

        Statements that return no rows (DDL/DML) yield an empty outcome.
        """
        self._ensure_store_exists()
        params = tuple(query.parameters) if query.parameters else None

        try:
            async with self.engine.begin() as conn:
                result = await conn.exec_driver_sql(query.text, params)
                if not result.returns_rows:
                    return BackendOutcome(rows=[], columns=[])
                keys = [str(k) for k in result.keys()]
                # zip, not mappings(): RowMapping refuses ambiguous duplicate names
                rows: List[Dict[str, Any]] = [
                    {key: _json_safe(value) for key, value in zip(keys, row)}
                    for row in result.all()
                ]
                columns = _unique_columns(keys)
        except SQLAlchemyError as e:
            raise LocalExecutionFailure(
                _driver_message(e),
                context={"store_path": self.store_path, "error_type": type(e).__name__},
            ) from e
        except OSError as e:
            raise LocalExecutionFailure(
                f"{type(e).__name__}: {e}",
                context={"store_path": self.store_path},
            ) from e

        logger.debug("Local store returned %d rows, columns=%s", len(rows), columns)
        return BackendOutcome(rows=rows, columns=columns)

    async def health_check(self) -> bool:
        """Runs SELECT 1 against the store; False if the store is unreachable."""
        try:
            self._ensure_store_exists()
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (LocalExecutionFailure, SQLAlchemyError, OSError) as e:
            logger.warning("Local store health check failed: %s", str(e))
            return False

    async def aclose(self) -> None:
        """Close all pooled SQLite connections."""
        await self.engine.dispose()
