"""
Scout Query Service — Application Package Initializer
=======================================================

Architecture Note:
    ┌─────────────────────────────────────┐
    │       Routes (API Layer)            │  ← /api/mcp/*, /health
    ├─────────────────────────────────────┤
    │       QueryClient (services)        │  ← validate → route → normalize
    ├─────────────────────────────────────┤
    │  LocalStoreBackend │ RemoteService  │  ← SQLite (aiosqlite) │ httpx
    ├─────────────────────────────────────┤
    │  Schemas (pydantic) & Models (ORM)  │  ← wire contract, store tables
    └─────────────────────────────────────┘

The QueryClient is usable on its own, without the HTTP layer:

    from scout.services.query_client import create_query_client

    client = create_query_client()
    result = await client.execute_query({"query": "SELECT 1 AS id"})
    await client.aclose()
"""

__version__ = "1.0.0"
