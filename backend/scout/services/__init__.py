# Services package init
"""
Scout Query Service — Services Layer
======================================

Service Inventory:
    - validator:          validate_request(), pure request normalization
    - backend_base:       QueryBackend ABC + BackendOutcome
    - local_backend:      LocalStoreBackend (embedded SQLite via aiosqlite)
    - remote_backend:     RemoteServiceBackend (httpx + tenacity retries)
    - normalizer:         success_result() / failure_result()
    - analytics_queries:  fixed dashboard query builders
    - query_client:       QueryClient façade, create_query_client(), get_query_client()
"""
