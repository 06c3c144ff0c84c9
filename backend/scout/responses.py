"""
Scout Query Service — Response Builders
=========================================

What:  The two functions every route and exception handler uses to build a
       JSON response: api_response() for success, error_response() for errors.
How:   Each call builds its body explicitly and stamps it with the current
       request ID (from RequestIDMiddleware's ContextVar) and a UTC timestamp.
       Payloads that are already enveloped are never re-wrapped, since only
       these functions produce envelopes.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from scout.middleware.request_id import request_id_var
from scout.schemas.api import ApiResponse, ErrorResponse


def _payload(data: Any) -> Any:
    # Pydantic payloads go out under their wire aliases, without null fields
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", by_alias=True, exclude_none=True)
    return jsonable_encoder(data)


def api_response(data: Any = None, status_code: int = 200) -> JSONResponse:
    """Wrap `data` in the success envelope."""
    envelope = ApiResponse(
        success=True,
        data=_payload(data),
        request_id=request_id_var.get("") or None,
        timestamp=datetime.now(timezone.utc),
    )
    return JSONResponse(
        status_code=status_code,
        content=envelope.model_dump(mode="json"),
    )


def error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Build the standard error body; `details` is omitted when empty."""
    body = ErrorResponse(
        error=error,
        message=message,
        details=jsonable_encoder(details) if details else None,
        request_id=request_id_var.get("") or None,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )
