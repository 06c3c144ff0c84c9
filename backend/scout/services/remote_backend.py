"""
Scout Query Service — Remote Query Service Backend
====================================================

What:  Execution strategy for queries targeted at the networked query service.
How:   POSTs {"query": text, "params": parameters} to {remote_endpoint}/query
       with a bearer credential, bounded per attempt by timeout_millis, with
       tenacity retrying transient failures up to max_retries attempts.
Who:   Selected by QueryClient for QueryTarget.REMOTE.

Resilience Strategy:
    1. Per-attempt timeout: httpx timeouts plus an asyncio.wait_for ceiling
       on the whole attempt (connect + send + read + decode)
    2. Tenacity retry with exponential backoff + jitter, sequential attempts
    3. Only TransportFailure (incl. QueryTimeoutError) is retried;
       RemoteRejection surfaces after the first attempt

Failure classification:
    httpx.TimeoutException / attempt budget exceeded   → QueryTimeoutError   (retried)
    httpx.TransportError (connect, reset, protocol)    → TransportFailure    (retried)
    HTTP 408 / 429 / 5xx                               → TransportFailure    (retried)
    other non-2xx                                      → RemoteRejection
    2xx with `error` field or `success: false`         → RemoteRejection
    2xx body not JSON / rows not a list of objects     → RemoteRejection

Expected success body (shape metadata optional):
    {"data": [{"id": 1}, ...], "columns": ["id", ...]}
"""

import asyncio
import json
import logging
from typing import Any, Optional

import httpx
from fastapi.encoders import jsonable_encoder
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from scout.exceptions import QueryTimeoutError, RemoteQueryError, RemoteRejection, TransportFailure
from scout.schemas.query import ClientConfiguration, ValidatedQuery
from scout.services.backend_base import BackendOutcome, QueryBackend

logger = logging.getLogger(__name__)

# Statuses that mean "try again later" rather than "no"
TRANSIENT_STATUS_CODES = frozenset({408, 429})

# Longest slice of a response body quoted in a failure message
_BODY_EXCERPT = 200


def _excerpt(body: str) -> str:
    body = body.strip()
    return body if len(body) <= _BODY_EXCERPT else body[:_BODY_EXCERPT] + "..."


def _remote_error_text(payload: Any) -> Optional[str]:
    """Pull the remote service's own error description out of a JSON body."""
    if not isinstance(payload, dict):
        return None
    error = payload.get("error")
    if error:
        if isinstance(error, dict):
            return str(error.get("message") or error)
        return str(error)
    if payload.get("success") is False:
        return str(payload.get("message") or "remote service reported success=false")
    return None


def parse_success_payload(payload: Any) -> BackendOutcome:
    """
    Read rows and shape metadata from a 2xx JSON body.

    Missing shape metadata degrades gracefully: no `columns` → [], and the
    row count is always taken from the rows themselves.

    Raises:
        RemoteRejection: the body cannot be interpreted as rows.
    """
    if isinstance(payload, list):
        rows, columns = payload, None
    elif isinstance(payload, dict):
        rows = payload.get("data")
        if rows is None:
            rows = payload.get("rows", [])
        columns = payload.get("columns")
    else:
        raise RemoteRejection(f"malformed response payload: expected an object, got {type(payload).__name__}")

    if rows is None:
        rows = []
    if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
        raise RemoteRejection("malformed response payload: rows must be a list of objects")

    if isinstance(columns, list) and all(isinstance(c, str) for c in columns):
        columns = list(dict.fromkeys(columns))
    else:
        columns = []

    return BackendOutcome(rows=rows, columns=columns)


class RemoteServiceBackend(QueryBackend):
    """
    HTTP execution strategy with bounded, sequential retries.

    Args:
        config:    Client configuration (endpoint, credential, timeout, retries).
        transport: Optional httpx transport; tests pass httpx.MockTransport.

    The httpx.AsyncClient is created once and reused for connection pooling;
    it carries no per-request state.
    """

    name = "remote"

    def __init__(
        self,
        config: ClientConfiguration,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.client = httpx.AsyncClient(
            base_url=config.remote_endpoint,
            timeout=httpx.Timeout(config.timeout_seconds),
            headers={
                "Content-Type": "application/json",
                # Empty credential is still sent; the remote service is the authority
                "Authorization": f"Bearer {config.api_key or ''}",
            },
            transport=transport,
        )

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            retry=retry_if_exception_type(TransportFailure),
            stop=stop_after_attempt(self.config.max_retries),
            # wait = min(max, initial * 2^n) + random(0, jitter)
            wait=wait_exponential_jitter(
                initial=self.config.retry_min_wait_millis / 1000,
                max=self.config.retry_max_wait_millis / 1000,
                jitter=self.config.retry_min_wait_millis / 1000,
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    async def execute(self, query: ValidatedQuery) -> BackendOutcome:
        """
        Send the query, retrying transient failures.

        Raises:
            QueryTimeoutError / TransportFailure: after max_retries attempts
            RemoteRejection: on the first explicit rejection, or when the
                parameters cannot be encoded as JSON (no attempt is made)
        """
        content = self._encode_body(query)
        attempts = 0

        try:
            async for attempt in self._retrying():
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    return await self._attempt(content, attempts)
        except RemoteQueryError as e:
            e.attempts = attempts
            raise

        # stop_after_attempt(>=1) always runs at least once
        raise TransportFailure("no attempt was made", attempts=attempts)

    def _encode_body(self, query: ValidatedQuery) -> str:
        """
        Serialize the request body once for all attempts.

        Decimal, datetime, UUID and similar values go through jsonable_encoder;
        NaN and infinity are not valid JSON and are refused.
        """
        body = {"query": query.text, "params": list(query.parameters)}
        try:
            return json.dumps(jsonable_encoder(body), allow_nan=False)
        except (TypeError, ValueError) as e:
            raise RemoteRejection(
                f"parameters not JSON-encodable: {type(e).__name__}: {e}",
                attempts=0,
            ) from e

    async def _attempt(self, content: str, attempt_number: int) -> BackendOutcome:
        """One bounded round trip."""
        try:
            return await asyncio.wait_for(
                self._send(content),
                timeout=self.config.timeout_seconds,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.warning(
                "Remote attempt %d timed out after %dms",
                attempt_number,
                self.config.timeout_millis,
            )
            raise QueryTimeoutError(
                f"no response within {self.config.timeout_millis}ms ({type(e).__name__})"
            ) from e
        except httpx.TransportError as e:
            logger.warning("Remote attempt %d transport error: %s", attempt_number, str(e))
            raise TransportFailure(f"{type(e).__name__}: {e}") from e

    async def _send(self, content: str) -> BackendOutcome:
        response = await self.client.post("/query", content=content)
        status = response.status_code

        if status >= 500 or status in TRANSIENT_STATUS_CODES:
            raise TransportFailure(
                f"HTTP {status}: {_excerpt(response.text)}",
                status_code=status,
            )

        try:
            payload = response.json()
        except ValueError:
            payload = None
            if response.is_success:
                raise RemoteRejection(
                    f"malformed response payload (HTTP {status}, not JSON): {_excerpt(response.text)}",
                    status_code=status,
                )

        if not response.is_success:
            detail = _remote_error_text(payload) or _excerpt(response.text)
            raise RemoteRejection(f"HTTP {status}: {detail}", status_code=status)

        remote_error = _remote_error_text(payload)
        if remote_error:
            raise RemoteRejection(remote_error, status_code=status)

        return parse_success_payload(payload)

    async def health_check(self) -> bool:
        """GET {remote_endpoint}/health; True on any 2xx."""
        try:
            response = await self.client.get("/health")
            return response.is_success
        except httpx.HTTPError as e:
            logger.warning("Remote query service health check failed: %s", str(e))
            return False

    async def aclose(self) -> None:
        await self.client.aclose()
