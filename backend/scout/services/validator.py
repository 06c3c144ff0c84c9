"""
Scout Query Service — Request Validator
=========================================

What:  Normalizes an inbound query request or rejects it before dispatch.
How:   Reads the request through the loose QueryRequest model (so both wire
       aliases and Python field names work), drops absent values, then
       validates into the strict ValidatedQuery model.
Who:   Called by QueryClient.execute_query() as the first pipeline stage.

Rules:
    text        required, non-empty, non-blank string      → else ValidationError
    parameters  optional sequence; None means []           → else ValidationError
    target      optional; None means "local"; must be
                "local" or "remote"                         → else ValidationError

Pure function: no I/O, no logging side effects, no backend access.
"""

from collections.abc import Mapping
from typing import Any, Dict, List, Union

from pydantic import ValidationError as PydanticValidationError

from scout.exceptions import ValidationError
from scout.schemas.query import QueryRequest, ValidatedQuery


def _describe_errors(exc: PydanticValidationError) -> str:
    """Flatten pydantic errors into 'field: message; field: message'."""
    parts: List[str] = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ())) or "request"
        parts.append(f"{location}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts)


def validate_request(request: Union[QueryRequest, Mapping]) -> ValidatedQuery:
    """
    Validate and normalize one query request.

    Args:
        request: A QueryRequest, or a mapping using either field names
                 (text/parameters/target) or wire names (query/params/database).

    Returns:
        ValidatedQuery with the default target filled in.

    Raises:
        ValidationError: message "Query validation failed: <cause>", where
            <cause> is the underlying schema error text; the structured error
            list is kept in `context["errors"]`.
    """
    if isinstance(request, Mapping):
        request = QueryRequest.model_validate(dict(request))
    elif not isinstance(request, QueryRequest):
        raise ValidationError(
            message=(
                "Query validation failed: request must be a QueryRequest or a mapping, "
                f"got {type(request).__name__}"
            ),
            field="request",
        )

    # Absent and explicit-null values both fall back to the ValidatedQuery defaults
    payload: Dict[str, Any] = request.model_dump(exclude_none=True)

    try:
        return ValidatedQuery.model_validate(payload)
    except PydanticValidationError as e:
        errors = e.errors(include_url=False)
        field = str(errors[0]["loc"][0]) if errors and errors[0].get("loc") else None
        raise ValidationError(
            message=f"Query validation failed: {_describe_errors(e)}",
            field=field,
            context={"errors": [{"loc": list(err["loc"]), "msg": err["msg"]} for err in errors]},
        ) from e
