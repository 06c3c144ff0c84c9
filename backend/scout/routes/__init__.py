# Routes package init
"""
Scout Query Service — API Routes Package
==========================================

Route Inventory:
    - query.py:   POST /api/mcp/query
                  GET  /api/mcp/kpis
                  GET  /api/mcp/stores/performance
                  GET  /api/mcp/transactions/trends
    - health.py:  GET  /health

Routes stay thin: pull the client from app state, call one method, wrap the
result with scout.responses.
"""
