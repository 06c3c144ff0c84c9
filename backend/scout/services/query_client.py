"""
Scout Query Service — Query Client (Pipeline Orchestrator)
============================================================

What:  Single entry point for running analytics queries against either the
       embedded SQLite store or the remote query service.
How:   Validate → Route → Normalize, in that order, for every call.
Who:   Called by the /api/mcp routes (via get_query_client) and by any Python
       caller holding a client from create_query_client().
When:  One client per process (created in the app lifespan), shared by all
       concurrent requests.

Pipeline:
    ┌──────────────┐    ┌──────────────┐    ┌──────────────────┐    ┌──────────────┐
    │ QueryRequest │───▶│  Validator   │───▶│  Backend Router  │───▶│  Normalizer  │
    │ (any shape)  │    │ (pure)       │    │ local | remote   │    │ QueryResult  │
    └──────────────┘    └──────┬───────┘    └────────┬─────────┘    └──────────────┘
                               │ ValidationError     │ QueryExecutionError
                               └─────────────────────┴──────▶ failure_result()

Guarantees:
    - execute_query() always returns a QueryResult; it never raises
    - a request that fails validation never reaches a backend
    - exactly one backend is consulted per call, with no fallback to the other
    - the client holds only immutable configuration and pooled handles, so
      concurrent calls need no locking
"""

import logging
import time
import uuid
from typing import Any, Dict, Mapping, Optional, Union

from fastapi import Request

from scout.config import settings
from scout.exceptions import QueryExecutionError, ValidationError
from scout.schemas.query import ClientConfiguration, QueryRequest, QueryResult, QueryTarget, ValidatedQuery
from scout.services.analytics_queries import (
    aggregate_kpis_request,
    store_ranking_request,
    trend_series_request,
)
from scout.services.backend_base import QueryBackend
from scout.services.local_backend import LocalStoreBackend
from scout.services.normalizer import failure_result, success_result
from scout.services.remote_backend import RemoteServiceBackend
from scout.services.validator import validate_request

logger = logging.getLogger(__name__)


class QueryClient:
    """
    Query façade over the local and remote execution strategies.

    Args:
        config:         Immutable client configuration.
        local_backend:  Override for the embedded-store strategy (tests).
        remote_backend: Override for the remote-service strategy (tests).
    """

    def __init__(
        self,
        config: ClientConfiguration,
        local_backend: Optional[QueryBackend] = None,
        remote_backend: Optional[QueryBackend] = None,
    ):
        self.config = config
        if local_backend is None:
            local_backend = LocalStoreBackend(config.local_store_path)
        if remote_backend is None:
            remote_backend = RemoteServiceBackend(config)
        self._backends: Dict[QueryTarget, QueryBackend] = {
            QueryTarget.LOCAL: local_backend,
            QueryTarget.REMOTE: remote_backend,
        }

    async def execute_query(self, request: Union[QueryRequest, Mapping[str, Any]]) -> QueryResult:
        """
        Run one query request through the full pipeline.

        Args:
            request: QueryRequest or mapping with query/params/database
                     (or text/parameters/target).

        Returns:
            QueryResult. Validation and execution failures come back as
            `succeeded=False` with a diagnostic failure_message.
        """
        try:
            query = validate_request(request)
        except ValidationError as e:
            logger.warning("Rejected query request: %s", e.message)
            return failure_result(e)
        except Exception as e:
            logger.error("Unexpected error validating query request: %s", str(e), exc_info=True)
            return failure_result(e)

        return await self.dispatch(query)

    async def dispatch(self, query: ValidatedQuery) -> QueryResult:
        """
        Execute an already-validated query on the backend its target names.

        The elapsed time covers the backend call only, retries and backoff
        included.
        """
        # Short ID correlates the start/finish log lines of one dispatch
        dispatch_id = str(uuid.uuid4())[:8]
        backend = self._backends[query.target]

        logger.debug(
            "[%s] Dispatching to %s backend (%d params)",
            dispatch_id,
            backend.name,
            len(query.parameters),
        )

        start = time.perf_counter()
        try:
            outcome = await backend.execute(query)
        except QueryExecutionError as e:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.warning(
                "[%s] %s query failed after %.0fms: %s",
                dispatch_id,
                backend.name,
                elapsed_ms,
                e.failure_message,
            )
            return failure_result(e)
        except Exception as e:
            logger.error(
                "[%s] Unexpected error from %s backend: %s",
                dispatch_id,
                backend.name,
                str(e),
                exc_info=True,
            )
            return failure_result(e)

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "[%s] %s query returned %d rows in %.0fms",
            dispatch_id,
            backend.name,
            len(outcome.rows),
            elapsed_ms,
        )
        return success_result(outcome, elapsed_ms)

    # ── Convenience analytics queries (always local) ──────────────────────

    async def get_aggregate_kpis(self) -> QueryResult:
        """Trailing-month total revenue and transaction count."""
        return await self.execute_query(aggregate_kpis_request())

    async def get_store_ranking(self) -> QueryResult:
        """Stores ranked by trailing-month revenue, highest first."""
        return await self.execute_query(store_ranking_request())

    async def get_trend_series(self) -> QueryResult:
        """Daily transaction count and revenue over the trailing 30 days."""
        return await self.execute_query(trend_series_request())

    # ── Lifecycle ─────────────────────────────────────────────────────────

    async def health(self) -> Dict[str, bool]:
        """Probe both backends. Returns {"local": bool, "remote": bool}."""
        return {
            target.value: await backend.health_check()
            for target, backend in self._backends.items()
        }

    async def aclose(self) -> None:
        """Release the SQLite engine and the HTTP connection pool."""
        for backend in self._backends.values():
            await backend.aclose()


def create_query_client(**overrides: Any) -> QueryClient:
    """
    Build a QueryClient from process settings merged with overrides.

    Overrides use ClientConfiguration field names; None values are ignored.

    Example:
        client = create_query_client(remote_endpoint="http://localhost:8080", max_retries=1)
    """
    config = ClientConfiguration.from_settings(settings, **overrides)
    logger.info(
        "Query client configured: local_store=%s remote=%s timeout=%dms attempts=%d",
        config.local_store_path,
        config.remote_endpoint,
        config.timeout_millis,
        config.max_retries,
    )
    return QueryClient(config)


def get_query_client(request: Request) -> QueryClient:
    """FastAPI dependency: the client created in the app lifespan."""
    return request.app.state.query_client
