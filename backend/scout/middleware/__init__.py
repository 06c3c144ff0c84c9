# Middleware package init
"""
Scout Query Service — Middleware Package
==========================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    1. Request ID first: every later log line and response body can carry it
    2. Logging: measures duration and writes the access line
    3. CORS: Starlette's CORSMiddleware (handles browser preflight)
"""
