"""
Scout Query Service — Analytics Query Builder Tests
=====================================================
"""

import pytest

from scout.schemas.query import QueryTarget
from scout.services.analytics_queries import (
    aggregate_kpis_request,
    store_ranking_request,
    trend_series_request,
)
from scout.services.validator import validate_request

BUILDERS = [aggregate_kpis_request, store_ranking_request, trend_series_request]


@pytest.mark.parametrize("builder", BUILDERS)
def test_builders_target_local_without_parameters(builder):
    query = validate_request(builder())
    assert query.target is QueryTarget.LOCAL
    assert query.parameters == []


@pytest.mark.parametrize("builder", BUILDERS)
def test_builders_return_fresh_requests(builder):
    assert builder() is not builder()


def test_kpis_use_trailing_month_window():
    text = aggregate_kpis_request().text
    assert text.count("date('now', '-1 month')") == 2
    assert "UNION ALL" in text


def test_store_ranking_orders_by_revenue():
    assert store_ranking_request().text.rstrip().endswith("ORDER BY total_revenue DESC")


def test_trend_series_uses_thirty_day_window():
    text = trend_series_request().text
    assert "date('now', '-30 days')" in text
    assert "GROUP BY date(timestamp)" in text
