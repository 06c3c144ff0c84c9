"""
Scout Query Service — Query Route Handlers
============================================

What:  HTTP access to the query client under /api/mcp.
How:   Each handler calls one QueryClient method and wraps the QueryResult in
       the success envelope. A failed query is still a handled request
       (HTTP 200, `data.success == false`); the failure message tells the
       caller which stage failed.
Who:   Dashboard frontend and ad-hoc API callers.

Endpoints:
    POST /api/mcp/query                   run an arbitrary query
    GET  /api/mcp/kpis                    trailing-month headline numbers
    GET  /api/mcp/stores/performance      stores ranked by revenue
    GET  /api/mcp/transactions/trends     daily series, last 30 days
"""

import logging

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from scout.responses import api_response
from scout.schemas.api import ErrorResponse, QueryResponse
from scout.schemas.query import QueryRequest
from scout.services.query_client import QueryClient, get_query_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/mcp", tags=["Query"])

_ERROR_RESPONSES = {
    400: {"description": "Request body is not a JSON object", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}


@router.post(
    "/query",
    response_model=QueryResponse,
    responses=_ERROR_RESPONSES,
    summary="Execute a query",
    description=(
        "Runs `query` with positional `params` against the embedded store "
        "(`database: \"local\"`, the default) or the remote query service "
        "(`database: \"remote\"`). Invalid requests come back as a failed "
        "QueryResult and are never executed."
    ),
)
async def execute_query(
    request: QueryRequest = Body(
        ...,
        examples=[{"query": "SELECT id, name FROM stores WHERE region = ?", "params": ["North"]}],
    ),
    client: QueryClient = Depends(get_query_client),
) -> JSONResponse:
    result = await client.execute_query(request)
    return api_response(result)


@router.get(
    "/kpis",
    response_model=QueryResponse,
    responses=_ERROR_RESPONSES,
    summary="Trailing-month KPIs",
)
async def get_kpis(client: QueryClient = Depends(get_query_client)) -> JSONResponse:
    return api_response(await client.get_aggregate_kpis())


@router.get(
    "/stores/performance",
    response_model=QueryResponse,
    responses=_ERROR_RESPONSES,
    summary="Stores ranked by trailing-month revenue",
)
async def get_store_performance(client: QueryClient = Depends(get_query_client)) -> JSONResponse:
    return api_response(await client.get_store_ranking())


@router.get(
    "/transactions/trends",
    response_model=QueryResponse,
    responses=_ERROR_RESPONSES,
    summary="Daily transaction trends (last 30 days)",
)
async def get_transaction_trends(client: QueryClient = Depends(get_query_client)) -> JSONResponse:
    return api_response(await client.get_trend_series())
