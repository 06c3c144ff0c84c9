"""
Scout Query Service — Abstract Query Backend Interface
========================================================

What:  Abstract base class defining the contract for query execution strategies.
How:   Concrete backends inherit from QueryBackend and implement execute() and
       health_check(). The QueryClient keeps one instance per QueryTarget and
       picks one per call; it holds no other backend-specific logic.
Who:   LocalStoreBackend (embedded SQLite) and RemoteServiceBackend (HTTP).

Contract:
    - execute() returns a BackendOutcome on success, including empty results
    - every failure is raised as a QueryExecutionError subclass carrying the
      underlying cause text; nothing else should escape
    - implementations own their retry policy (only the remote one retries)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List

from scout.schemas.query import ValidatedQuery


@dataclass(frozen=True)
class BackendOutcome:
    """
    Raw success payload of one backend execution.

    Attributes:
        rows:     Records as column → value mappings, in backend order
        columns:  Column names reported by the backend (may be empty)
    """

    rows: List[Dict[str, Any]] = field(default_factory=list)
    columns: List[str] = field(default_factory=list)


class QueryBackend(ABC):
    """Interface shared by the local and remote execution strategies."""

    name = "backend"

    @abstractmethod
    async def execute(self, query: ValidatedQuery) -> BackendOutcome:
        """
        Run one validated query.

        Returns:
            BackendOutcome with rows and column names. Zero rows is a success.

        Raises:
            QueryExecutionError: any failure, classified by subclass
                (LocalExecutionFailure, TransportFailure, QueryTimeoutError,
                RemoteRejection).
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Lightweight reachability probe.

        Returns: True if the backend can currently serve queries. Never raises.
        """
        ...

    async def aclose(self) -> None:
        """Release pooled resources (connections, sockets)."""
        return None
