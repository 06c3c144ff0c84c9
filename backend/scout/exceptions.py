"""
Scout Query Service — Custom Exception Hierarchy
==================================================

What:  Application-specific exceptions for validation and query execution.
How:   Each exception carries a message and an optional context dict.
       Inside the query client, backend failures are raised by the execution
       strategies and converted into failed QueryResults by the normalizer.
       At the HTTP layer, global exception handlers (main.py) turn anything
       that still escapes into structured JSON errors.
Who:   Raised by the validator, backends and routes; caught by the
       QueryClient and by the global handlers.

Exception Hierarchy:
    ScoutError (base)
    ├── ValidationError              → failed QueryResult
    └── QueryExecutionError          → failed QueryResult (500 if it escapes)
        ├── TransportFailure         → retried (network errors, 408/429/5xx)
        │   └── QueryTimeoutError    → retried (attempt exceeded its budget)
        ├── RemoteRejection          → not retried (explicit remote error)
        └── LocalExecutionFailure    → not retried (embedded store error)
"""

from typing import Any, Dict, Optional


class ScoutError(Exception):
    """
    Base exception for all Scout application errors.

    Attributes:
        message:  Human-readable error description (safe to return to callers)
        context:  Additional debug info (logged, returned only as error details)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ScoutError):
    """
    Raised when a query request (or any client input) fails validation.

    What:    The request cannot be dispatched as given: query text missing or
             empty, parameters not a sequence, unknown routing target.
    When:    Raised by validate_request() before any backend is selected.
    Handled: QueryClient turns it into a failed QueryResult; it never
             reaches the HTTP layer.

    The message embeds the underlying schema-validation detail, so callers can
    recover the original cause from the text alone, e.g.:
        "Query validation failed: text: String should have at least 1 character"
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class QueryExecutionError(ScoutError):
    """
    Base class for failures raised by an execution strategy.

    Attributes:
        kind:      Classification label embedded in the failure message
        cause:     Text of the underlying fault (driver error, HTTP status, ...)
        attempts:  How many attempts were made before giving up
        transient: Whether the failure is eligible for retry

    The QueryClient never lets these escape; the normalizer turns them into
    `QueryResult(succeeded=False, failure_message=error.failure_message)`.
    """

    kind = "execution"
    transient = False
    label = "Query"

    def __init__(
        self,
        cause: str,
        attempts: int = 1,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.cause = cause
        self.attempts = attempts
        super().__init__(message=f"{self.label} query failed: {cause}", context=context)

    @property
    def failure_message(self) -> str:
        """Diagnostic text placed in a failed QueryResult."""
        return self.message


class LocalExecutionFailure(QueryExecutionError):
    """
    Raised when the embedded SQLite store cannot run a query.

    When:    Store file missing, SQL syntax error, unknown table, unbindable
             parameter, driver I/O error.
    Retry:   Never. Local failures are deterministic for a given query.
    """

    kind = "local_execution"
    label = "Local"


class RemoteQueryError(QueryExecutionError):
    """
    Base for remote-service failures.

    Message format:
        "Remote query failed [<kind>] after <n> attempt(s): <cause>"
    """

    label = "Remote"

    @property
    def failure_message(self) -> str:
        plural = "attempt" if self.attempts == 1 else "attempts"
        return f"Remote query failed [{self.kind}] after {self.attempts} {plural}: {self.cause}"


class TransportFailure(RemoteQueryError):
    """
    Raised when the remote service could not be reached or answered with a
    transient status.

    When:    Connection refused/reset, protocol error, HTTP 408/429/5xx.
    Retry:   Yes, up to ClientConfiguration.max_retries attempts in total.
    """

    kind = "transport"
    transient = True

    def __init__(
        self,
        cause: str,
        attempts: int = 1,
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if status_code is not None:
            ctx["status_code"] = status_code
        super().__init__(cause=cause, attempts=attempts, context=ctx)
        self.status_code = status_code


class QueryTimeoutError(TransportFailure):
    """
    Raised when one remote attempt exceeds `timeout_millis`.

    A timeout is a definitive failure for that attempt (counted against
    max_retries), never a hang.
    """

    kind = "timeout"


class RemoteRejection(RemoteQueryError):
    """
    Raised when the remote service explicitly refuses the query.

    When:    Non-transient 4xx status, a response body with an `error` field
             or `success: false`, or a payload that cannot be read as rows.
    Retry:   Never. The same request would be rejected again.
    """

    kind = "remote_rejected"

    def __init__(
        self,
        cause: str,
        attempts: int = 1,
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if status_code is not None:
            ctx["status_code"] = status_code
        super().__init__(cause=cause, attempts=attempts, context=ctx)
        self.status_code = status_code
