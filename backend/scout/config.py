"""
Scout Query Service — Application Configuration
=================================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or a .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Read by `ClientConfiguration.from_settings()` when a QueryClient is
       built, and by `main.py` for logging, CORS and server binding.
When:  Loaded once at module import time. The query client copies the values
       it needs at construction and never reads them again.

Environment variables (case-insensitive):
    LOCAL_STORE_PATH        Path to the embedded SQLite store
    MCP_SERVER_URL          Base URL of the remote query service
    MCP_API_KEY             Bearer credential for the remote service (may be empty)
    QUERY_TIMEOUT_MILLIS    Per-attempt budget for a remote dispatch
    QUERY_MAX_RETRIES       Total attempts per remote dispatch
    RETRY_MIN_WAIT_MILLIS   Backoff floor between remote attempts
    RETRY_MAX_WAIT_MILLIS   Backoff ceiling between remote attempts
    LOG_LEVEL, CORS_ORIGINS, BACKEND_HOST, BACKEND_PORT
"""

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator, model_validator
from typing import List


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have development defaults. Attributes are grouped by concern.
    """

    # ── Local Store ───────────────────────────────────────────────────────
    # What: Filesystem path of the embedded SQLite database
    # ":memory:" gives a throwaway in-process store (every connection is empty)
    local_store_path: str = Field(
        default="./dev.db",
        description="Path to the embedded SQLite analytics store",
    )

    # ── Remote Query Service ──────────────────────────────────────────────
    # What: Base URL; queries are POSTed to {mcp_server_url}/query
    mcp_server_url: str = Field(
        default="https://mcp-sqlite-backend.onrender.com",
        description="Base URL of the remote query service",
    )

    # What: Bearer token sent with every remote query
    # An empty key is still sent (as an empty token); the remote service decides
    mcp_api_key: str = Field(
        default="",
        description="Bearer credential for the remote query service",
        repr=False,
    )

    # What: Budget for one remote attempt, in milliseconds
    query_timeout_millis: int = Field(default=10_000, ge=100, le=120_000)

    # What: Total number of attempts for one remote dispatch (1 = no retry)
    query_max_retries: int = Field(default=3, ge=1, le=10)

    # ── Retry Backoff ─────────────────────────────────────────────────────
    # What: Tenacity exponential backoff bounds between remote attempts
    # Example: 250ms → 500ms → 1000ms (+ jitter), capped at retry_max_wait_millis
    retry_min_wait_millis: int = Field(default=250, ge=0, le=30_000)
    retry_max_wait_millis: int = Field(default=2_000, ge=0, le=120_000)

    @model_validator(mode="after")
    def validate_retry_window(self) -> "Settings":
        """Backoff floor must not exceed the ceiling."""
        if self.retry_min_wait_millis > self.retry_max_wait_millis:
            raise ValueError(
                "retry_min_wait_millis must be <= retry_max_wait_millis "
                f"(got {self.retry_min_wait_millis} > {self.retry_max_wait_millis})"
            )
        return self

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: Comma-separated URLs
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=3001, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # MCP_SERVER_URL and mcp_server_url both work
        "extra": "ignore",
    }


# Singleton instance, imported throughout the application
settings = Settings()
