"""
Scout Query Service — Analytics Query Builders
===============================================

Fixed dashboard queries over the embedded store's `transactions` and
`stores` tables (SQLite dialect). Each builder returns a parameter-free
QueryRequest that always targets the local store.
"""

from scout.schemas.query import QueryRequest, QueryTarget

# ── Trailing-month headline numbers ─────────────────────────────────────────
# Two rows: (name, value, period)
AGGREGATE_KPIS_SQL = """
SELECT
  'Total Revenue' AS name,
  SUM(amount) AS value,
  'monthly' AS period
FROM transactions
WHERE timestamp >= date('now', '-1 month')
UNION ALL
SELECT
  'Transaction Count' AS name,
  COUNT(*) AS value,
  'monthly' AS period
FROM transactions
WHERE timestamp >= date('now', '-1 month')
""".strip()

# ── Stores ranked by trailing-month revenue ─────────────────────────────────
# Stores without transactions in the window drop out (WHERE on the joined side)
STORE_RANKING_SQL = """
SELECT
  s.name,
  s.location,
  s.region,
  COUNT(t.id) AS transaction_count,
  SUM(t.amount) AS total_revenue,
  AVG(t.amount) AS avg_transaction
FROM stores s
LEFT JOIN transactions t ON s.id = t.storeId
WHERE t.timestamp >= date('now', '-1 month')
GROUP BY s.id, s.name, s.location, s.region
ORDER BY total_revenue DESC
""".strip()

# ── Daily series over the trailing 30 days ──────────────────────────────────
TREND_SERIES_SQL = """
SELECT
  date(timestamp) AS date,
  COUNT(*) AS transaction_count,
  SUM(amount) AS daily_revenue,
  AVG(amount) AS avg_order_value
FROM transactions
WHERE timestamp >= date('now', '-30 days')
GROUP BY date(timestamp)
ORDER BY date
""".strip()


def aggregate_kpis_request() -> QueryRequest:
    return QueryRequest(text=AGGREGATE_KPIS_SQL, target=QueryTarget.LOCAL)


def store_ranking_request() -> QueryRequest:
    return QueryRequest(text=STORE_RANKING_SQL, target=QueryTarget.LOCAL)


def trend_series_request() -> QueryRequest:
    return QueryRequest(text=TREND_SERIES_SQL, target=QueryTarget.LOCAL)
