"""Total validation of dashboard query parameters."""

from collections.abc import Mapping
from datetime import datetime, timedelta, UTC
from typing import Any

from insights_portal.models.analytics_query import (
    ALLOWED_LIMITS,
    DEFAULT_LIMIT,
    WINDOW_DAYS,
    AnalyticsQuerySpec,
    ProductSortKey,
)


def _first(value: Any) -> Any:
    """Repeated query parameters arrive as lists; the first one wins."""
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def _limit(raw: Any) -> int:
    try:
        candidate = int(str(_first(raw)).strip())
    except (TypeError, ValueError):
        return DEFAULT_LIMIT
    return candidate if candidate in ALLOWED_LIMITS else DEFAULT_LIMIT


def _sort_key(raw: Any) -> ProductSortKey:
    try:
        return ProductSortKey(_first(raw))
    except ValueError:
        return ProductSortKey.REVENUE


def validate_query(
    tenant_id: str,
    raw_params: Mapping[str, Any],
    now: datetime | None = None,
) -> AnalyticsQuerySpec:
    """
    Clamp raw dashboard parameters to an AnalyticsQuerySpec. Never fails.

    - stockLimit / prodLimit outside {5, 10, 20, 50} become 5
    - prodBy outside {revenue, quantity} becomes revenue
    - the window is always the 30 days ending now (start = now - 29 days);
      no parameter can move it

    Args:
        tenant_id: Tenant the dashboard is for
        raw_params: Query parameters as received (str or list of str values)
        now: Reference instant; defaults to the current UTC time

    Returns:
        A fully validated AnalyticsQuerySpec
    """
    window_end = (now or datetime.now(UTC)).replace(microsecond=0)
    window_start = window_end - timedelta(days=WINDOW_DAYS - 1)

    return AnalyticsQuerySpec(
        tenant_id=str(tenant_id),
        window_start=window_start,
        window_end=window_end,
        stock_limit=_limit(raw_params.get("stockLimit")),
        product_limit=_limit(raw_params.get("prodLimit")),
        product_sort_key=_sort_key(raw_params.get("prodBy")),
    )
