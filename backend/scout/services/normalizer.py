"""
Scout Query Service — Response Normalizer
===========================================

What:  Builds the uniform QueryResult envelope from a backend outcome or a
       failure, whichever backend produced it.
How:   Two explicit constructors. Callers pick one; nothing is patched or
       intercepted after the fact.
Who:   QueryClient.execute_query() / dispatch().

Failure message formats:
    validation   "Query validation failed: <cause>"
    local        "Local query failed: <cause>"
    remote       "Remote query failed [<kind>] after <n> attempt(s): <cause>"
    unexpected   "Query execution failed: <ExceptionType>: <cause>"
"""

from scout.exceptions import QueryExecutionError, ScoutError, ValidationError
from scout.schemas.query import QueryMetadata, QueryResult
from scout.services.backend_base import BackendOutcome


def success_result(outcome: BackendOutcome, elapsed_millis: float) -> QueryResult:
    """
    Wrap a backend outcome with complete shape metadata.

    Args:
        outcome:        Rows and columns returned by the backend
        elapsed_millis: Wall-clock dispatch time; negative clock skew clamps to 0
    """
    rows = list(outcome.rows)
    return QueryResult(
        succeeded=True,
        rows=rows,
        metadata=QueryMetadata(
            row_count=len(rows),
            execution_time_millis=max(0, int(round(elapsed_millis))),
            columns=list(dict.fromkeys(outcome.columns)),
        ),
    )


def failure_result(error: Exception) -> QueryResult:
    """Convert any failure into a failed QueryResult. Never raises."""
    if isinstance(error, QueryExecutionError):
        message = error.failure_message
    elif isinstance(error, ValidationError):
        message = error.message
    elif isinstance(error, ScoutError):
        message = f"Query execution failed: {error.message}"
    else:
        message = f"Query execution failed: {type(error).__name__}: {error}"

    return QueryResult(succeeded=False, failure_message=message or "Query execution failed")
