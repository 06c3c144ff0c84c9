"""
Scout Query Service — Test Configuration (conftest.py)
========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   The embedded store is a real temporary SQLite file created from the
       ORM models and seeded with a small known dataset; the remote service
       is an httpx.MockTransport driven by a scripted list of replies.

Fixture Hierarchy (all function-scoped):
    ├── seeded_store:    path of a fresh SQLite file with stores + transactions
    ├── client_config:   ClientConfiguration pointing at seeded_store, zero backoff
    ├── remote_service:  ScriptedRemote (MockTransport + request log)
    ├── query_client:    QueryClient over seeded_store and remote_service
    └── test_client:     HTTPX AsyncClient bound to an app serving query_client

Seeded dataset (timestamps relative to now, UTC):
    Alpha (North):  100.0 @ -1d, 200.0 @ -2d, 300.0 @ -2d
    Beta  (South):   50.0 @ -5d, 999.0 @ -60d (outside every window)
    Gamma (East):   no transactions
"""

import os
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, List, Union

# Override settings BEFORE any scout imports
os.environ["LOCAL_STORE_PATH"] = "./test-does-not-exist.db"
os.environ["MCP_SERVER_URL"] = "http://remote.test"
os.environ["MCP_API_KEY"] = "test-key-not-real"
os.environ["LOG_LEVEL"] = "WARNING"

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from scout.database import create_local_engine, init_local_store
from scout.models.analytics import Store, Transaction
from scout.schemas.query import ClientConfiguration
from scout.services.local_backend import LocalStoreBackend
from scout.services.query_client import QueryClient
from scout.services.remote_backend import RemoteServiceBackend

REMOTE_URL = "http://remote.test"


# ══════════════════════════════════════════════════════════════════════════
# Local Store
# ══════════════════════════════════════════════════════════════════════════

def _days_ago(days: int) -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(days=days)


@pytest_asyncio.fixture
async def seeded_store(tmp_path) -> str:
    """Creates and seeds a throwaway SQLite store; returns its path."""
    path = str(tmp_path / "analytics.db")
    engine = create_local_engine(path)
    try:
        await init_local_store(engine)
        async with AsyncSession(engine) as session:
            alpha = Store(id="store-alpha", name="Alpha", location="1 Main St", region="North")
            beta = Store(id="store-beta", name="Beta", location="2 High St", region="South")
            gamma = Store(id="store-gamma", name="Gamma", location="3 Mill Rd", region="East")
            session.add_all([alpha, beta, gamma])
            session.add_all([
                Transaction(store_id="store-alpha", amount=100.0, quantity=1, timestamp=_days_ago(1)),
                Transaction(store_id="store-alpha", amount=200.0, quantity=2, timestamp=_days_ago(2)),
                Transaction(store_id="store-alpha", amount=300.0, quantity=3, timestamp=_days_ago(2)),
                Transaction(store_id="store-beta", amount=50.0, quantity=1, timestamp=_days_ago(5)),
                Transaction(store_id="store-beta", amount=999.0, quantity=9, timestamp=_days_ago(60)),
            ])
            await session.commit()
    finally:
        await engine.dispose()
    return path


@pytest_asyncio.fixture
async def local_backend(seeded_store):
    backend = LocalStoreBackend(seeded_store)
    yield backend
    await backend.aclose()


# ══════════════════════════════════════════════════════════════════════════
# Remote Service
# ══════════════════════════════════════════════════════════════════════════

Reply = Union[httpx.Response, Exception, Callable[[httpx.Request], Any]]


class ScriptedRemote:
    """
    Fake remote query service.

    Each incoming request consumes the next scripted reply; the last reply
    repeats once the script runs out. A reply may be an httpx.Response, an
    exception to raise, or a (sync or async) callable taking the request.

    Usage:
        remote_service.script(httpx.Response(503), httpx.Response(200, json={...}))
        ...
        assert len(remote_service.requests) == 2
    """

    def __init__(self):
        self.replies: List[Reply] = [httpx.Response(200, json={"data": [], "columns": []})]
        self.requests: List[httpx.Request] = []
        self.transport = httpx.MockTransport(self._handle)

    def script(self, *replies: Reply) -> "ScriptedRemote":
        self.replies = list(replies)
        return self

    @property
    def query_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/query")]

    async def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests) - 1, len(self.replies) - 1)
        reply = self.replies[index]
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, httpx.Response):
            return reply
        result = reply(request)
        if hasattr(result, "__await__"):
            result = await result
        return result


@pytest.fixture
def remote_service() -> ScriptedRemote:
    return ScriptedRemote()


# ══════════════════════════════════════════════════════════════════════════
# Client
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def client_config(seeded_store) -> ClientConfiguration:
    """Three attempts, 500ms per attempt, no backoff sleep between attempts."""
    return ClientConfiguration(
        local_store_path=seeded_store,
        remote_endpoint=REMOTE_URL,
        timeout_millis=500,
        max_retries=3,
        api_key="test-key-not-real",
        retry_min_wait_millis=0,
        retry_max_wait_millis=0,
    )


@pytest_asyncio.fixture
async def remote_backend(client_config, remote_service):
    backend = RemoteServiceBackend(client_config, transport=remote_service.transport)
    yield backend
    await backend.aclose()


@pytest_asyncio.fixture
async def query_client(client_config, remote_service):
    client = QueryClient(
        client_config,
        remote_backend=RemoteServiceBackend(client_config, transport=remote_service.transport),
    )
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def test_client(query_client):
    """
    HTTPX AsyncClient talking to an app that serves `query_client`.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from scout.main import create_app

    app = create_app(client=query_client)
    # ASGITransport does not run the lifespan; attach the client directly
    app.state.query_client = query_client
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
