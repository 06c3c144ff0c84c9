"""
Scout Query Service — Query Schemas
=====================================

What:  Pydantic models for the query client's contract: the loosely-typed
       inbound request, its validated form, the uniform result envelope and
       the immutable client configuration.
How:   QueryRequest accepts anything (validation is the validator's job);
       ValidatedQuery is the strict, frozen form; QueryResult enforces the
       success/failure invariants in a model validator.
Who:   Used by the validator, the backends, the normalizer, the query client
       and the HTTP routes.

Wire format:
    Request:  {"query": "...", "params": [...], "database": "local" | "remote"}
    Result:   {"success": true, "data": [...],
               "metadata": {"rowCount": 1, "executionTime": 3, "columns": ["id"]}}
              {"success": false, "error": "Local query failed: ..."}
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class QueryTarget(str, Enum):
    """Routing key selecting the backend that executes a query."""

    LOCAL = "local"
    REMOTE = "remote"


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class QueryRequest(BaseModel):
    """
    What:  A request to execute one logical query, exactly as the caller sent it.
    Why loose types: A malformed request must reach validate_request() so it
           can come back as a failed QueryResult instead of a framework 422.

    Python callers use field names; JSON callers use the wire aliases:
        QueryRequest(text="SELECT 1", target="local")
        {"query": "SELECT 1", "database": "local"}
    """

    text: Any = Field(default=None, alias="query", description="Query body (opaque to the client)")
    parameters: Any = Field(
        default=None,
        alias="params",
        description="Ordered positional bind values; absent means none",
    )
    target: Any = Field(
        default=None,
        alias="database",
        description="Routing target: 'local' (default) or 'remote'",
    )

    model_config = {"populate_by_name": True}


class ValidatedQuery(BaseModel):
    """
    What:  A normalized request that is safe to dispatch.
    Invariants:
        - text is a non-blank string
        - parameters is a list (possibly empty), element types unrestricted
        - target is one of the two known QueryTarget values
    """

    text: str = Field(min_length=1)
    parameters: List[Any] = Field(default_factory=list)
    target: QueryTarget = QueryTarget.LOCAL

    model_config = {"frozen": True}

    @field_validator("text")
    @classmethod
    def validate_text_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("query text must not be blank")
        return v


# ══════════════════════════════════════════════════════════════════════════
# Result Models
# ══════════════════════════════════════════════════════════════════════════


class QueryMetadata(BaseModel):
    """
    Shape metadata describing a successful result.

    All three fields are always present together; a result either carries a
    complete QueryMetadata or none at all.
    """

    row_count: int = Field(ge=0, alias="rowCount")
    execution_time_millis: int = Field(ge=0, alias="executionTime")
    columns: List[str] = Field(default_factory=list)

    model_config = {"populate_by_name": True, "frozen": True}

    @field_validator("columns")
    @classmethod
    def validate_unique_columns(cls, v: List[str]) -> List[str]:
        if len(set(v)) != len(v):
            raise ValueError(f"column names must be unique, got {v}")
        return v


class QueryResult(BaseModel):
    """
    What:  The uniform outcome of one execute_query() call, regardless of backend.

    Invariants (checked on construction):
        succeeded=True   → rows present, failure_message absent,
                           metadata.row_count == len(rows) when metadata present
        succeeded=False  → failure_message non-empty, rows and metadata absent
    """

    succeeded: bool = Field(alias="success")
    rows: Optional[List[Dict[str, Any]]] = Field(default=None, alias="data")
    failure_message: Optional[str] = Field(default=None, alias="error")
    metadata: Optional[QueryMetadata] = None

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def validate_envelope(self) -> "QueryResult":
        if self.succeeded:
            if self.rows is None:
                raise ValueError("a successful result must carry rows (possibly empty)")
            if self.failure_message is not None:
                raise ValueError("a successful result must not carry a failure message")
            if self.metadata is not None and self.metadata.row_count != len(self.rows):
                raise ValueError(
                    f"metadata.row_count ({self.metadata.row_count}) != len(rows) ({len(self.rows)})"
                )
        else:
            if not self.failure_message:
                raise ValueError("a failed result must carry a non-empty failure message")
            if self.rows is not None or self.metadata is not None:
                raise ValueError("a failed result must not carry rows or metadata")
        return self


# ══════════════════════════════════════════════════════════════════════════
# Client Configuration
# ══════════════════════════════════════════════════════════════════════════


class ClientConfiguration(BaseModel):
    """
    Immutable settings owned by one QueryClient.

    Built once at client construction from process settings merged with
    caller overrides (see from_settings). Shared read-only by every
    concurrent call on that client.

    Attributes:
        local_store_path:       SQLite file of the embedded backend
        remote_endpoint:        Base URL of the networked backend
        timeout_millis:         Budget for one remote attempt
        max_retries:            Total attempts per remote dispatch
        api_key:                Bearer credential for the remote backend
        retry_min_wait_millis:  Backoff floor between remote attempts
        retry_max_wait_millis:  Backoff ceiling between remote attempts
    """

    local_store_path: str
    remote_endpoint: str
    timeout_millis: int = Field(gt=0)
    max_retries: int = Field(ge=1)
    api_key: str = Field(default="", repr=False)
    retry_min_wait_millis: int = Field(default=250, ge=0)
    retry_max_wait_millis: int = Field(default=2_000, ge=0)

    model_config = {"frozen": True}

    @field_validator("remote_endpoint")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @model_validator(mode="after")
    def validate_retry_window(self) -> "ClientConfiguration":
        if self.retry_min_wait_millis > self.retry_max_wait_millis:
            raise ValueError("retry_min_wait_millis must be <= retry_max_wait_millis")
        return self

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_millis / 1000

    @classmethod
    def from_settings(cls, settings: Any, **overrides: Any) -> "ClientConfiguration":
        """
        Merge process settings with caller-supplied overrides.

        Example:
            config = ClientConfiguration.from_settings(settings, max_retries=1)
        """
        values: Dict[str, Any] = {
            "local_store_path": settings.local_store_path,
            "remote_endpoint": settings.mcp_server_url,
            "timeout_millis": settings.query_timeout_millis,
            "max_retries": settings.query_max_retries,
            "api_key": settings.mcp_api_key,
            "retry_min_wait_millis": settings.retry_min_wait_millis,
            "retry_max_wait_millis": settings.retry_max_wait_millis,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
