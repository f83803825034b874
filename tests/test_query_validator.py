from datetime import datetime, timedelta, UTC

import pytest

from insights_portal.models.analytics_query import AnalyticsQuerySpec, ProductSortKey
from insights_portal.services.query_validator import validate_query

NOW = datetime(2026, 10, 18, 12, 30, 45, 123456, tzinfo=UTC)


def test_defaults_when_no_parameters():
    spec = validate_query("t-1", {}, now=NOW)
    assert spec.tenant_id == "t-1"
    assert spec.stock_limit == 5
    assert spec.product_limit == 5
    assert spec.product_sort_key == ProductSortKey.REVENUE


def test_window_is_thirty_days_ending_now():
    spec = validate_query("t-1", {}, now=NOW)
    assert spec.window_end == NOW.replace(microsecond=0)
    assert spec.window_end - spec.window_start == timedelta(days=29)


@pytest.mark.parametrize("raw,expected", [("5", 5), ("10", 10), ("20", 20), ("50", 50), (" 20 ", 20)])
def test_allowed_limits_pass_through(raw, expected):
    spec = validate_query("t-1", {"stockLimit": raw, "prodLimit": raw}, now=NOW)
    assert spec.stock_limit == expected
    assert spec.product_limit == expected


@pytest.mark.parametrize("raw", ["7", "0", "-5", "abc", "", "20abc", "1e1", None])
def test_invalid_limits_fall_back_to_five(raw):
    spec = validate_query("t-1", {"stockLimit": raw, "prodLimit": raw}, now=NOW)
    assert spec.stock_limit == 5
    assert spec.product_limit == 5


def test_sort_key_quantity():
    spec = validate_query("t-1", {"prodBy": "quantity"}, now=NOW)
    assert spec.product_sort_key == ProductSortKey.QUANTITY


@pytest.mark.parametrize("raw", ["price", "REVENUE", "", None])
def test_unknown_sort_key_falls_back_to_revenue(raw):
    spec = validate_query("t-1", {"prodBy": raw}, now=NOW)
    assert spec.product_sort_key == ProductSortKey.REVENUE


def test_repeated_parameters_use_first_value():
    spec = validate_query("t-1", {"stockLimit": ["20", "50"], "prodBy": ["quantity", "revenue"]}, now=NOW)
    assert spec.stock_limit == 20
    assert spec.product_sort_key == ProductSortKey.QUANTITY


def test_window_cannot_be_moved_by_parameters():
    spec = validate_query("t-1", {"start": "2020-01-01", "end": "2020-02-01"}, now=NOW)
    assert spec.window_end == NOW.replace(microsecond=0)


def test_validation_is_idempotent():
    spec = validate_query("t-1", {"stockLimit": "50", "prodLimit": "10", "prodBy": "quantity"}, now=NOW)
    again = validate_query("t-1", spec.as_query_params(), now=NOW)
    assert again == spec


def test_spec_rejects_disallowed_values_directly():
    with pytest.raises(ValueError):
        AnalyticsQuerySpec(tenant_id="t-1", window_start=NOW, window_end=NOW, stock_limit=7)
    with pytest.raises(ValueError):
        AnalyticsQuerySpec(tenant_id="t-1", window_start=NOW, window_end=NOW - timedelta(days=1))
