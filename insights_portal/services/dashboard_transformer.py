"""
Reshapes aggregated analytics into the series each chart needs.

Pure and synchronous. Missing or malformed values become zero / empty.
"""

import math
from collections.abc import Callable, Iterable
from typing import Any

from insights_portal.models.analytics_query import AnalyticsQuerySpec, ProductSortKey
from insights_portal.schemas.analytics_schemas import (
    AggregatedDashboard,
    CustomerSpend,
    DailyRevenue,
    NewVsReturning,
    ProductSales,
    StatusCount,
)
from insights_portal.schemas.dashboard_schemas import (
    ChartSeries,
    DatePoint,
    KpiSummary,
    NamedTotal,
    NamedValue,
    ProductRow,
    StatusSlice,
    StockoutItem,
)
from insights_portal.schemas.tenant_schemas import TenantStats

Accessor = Callable[[dict[str, Any]], Any]


def _number(value: Any) -> float:
    """Finite number or 0."""
    if isinstance(value, bool) or value is None:
        return 0.0
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0.0
    return result if math.isfinite(result) else 0.0


def string_field(name: str) -> Accessor:
    """Accessor returning record[name] when it is a non-empty string."""

    def access(record: dict[str, Any]) -> str | None:
        value = record.get(name)
        return value if isinstance(value, str) and value else None

    return access


def number_field(name: str) -> Accessor:
    """Accessor returning record[name] when it is a number (bools excluded)."""

    def access(record: dict[str, Any]) -> float | None:
        value = record.get(name)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return value

    return access


def first_present(record: dict[str, Any], accessors: Iterable[Accessor]) -> Any:
    """Value of the first accessor that finds something, in order."""
    for access in accessors:
        value = access(record)
        if value is not None:
            return value
    return None


# Stock records come from several inventory sources with different field names.
STOCK_ID_FIELDS = (string_field("productId"), string_field("id"))
STOCK_TITLE_FIELDS = (string_field("title"), string_field("name"))
STOCK_SKU_FIELDS = (string_field("sku"), string_field("variantSku"), string_field("skuCode"))
STOCK_QUANTITY_FIELDS = (
    number_field("available"),
    number_field("quantity"),
    number_field("stock"),
    number_field("inventory"),
)


def stockout_item(record: dict[str, Any]) -> StockoutItem:
    product_id = first_present(record, STOCK_ID_FIELDS) or ""
    title = first_present(record, STOCK_TITLE_FIELDS) or f"Product {product_id}"
    return StockoutItem(
        id=product_id or title,
        title=title,
        sku=first_present(record, STOCK_SKU_FIELDS),
        qty=first_present(record, STOCK_QUANTITY_FIELDS) or 0,
    )


def revenue_series(rows: list[DailyRevenue]) -> list[DatePoint]:
    return [DatePoint(date=row.date, total=_number(row.revenue)) for row in rows]


def status_slices(rows: list[StatusCount]) -> list[StatusSlice]:
    return [StatusSlice(status=row.status, count=row.count) for row in rows]


def customer_totals(rows: list[CustomerSpend]) -> list[NamedTotal]:
    """Name is 'First Last', or '#<customerId>' when the customer has no name."""
    series = []
    for row in rows:
        name = " ".join(part for part in (row.first_name, row.last_name) if part)
        series.append(NamedTotal(name=name or f"#{row.customer_id or ''}", total=_number(row.total_spent)))
    return series


def product_rows(rows: list[ProductSales]) -> list[ProductRow]:
    result = []
    for row in rows:
        if row.title is not None:
            name = row.title
        elif row.product_id and row.product_id != "0":
            name = f"#{row.product_id}"
        else:
            name = "Product"
        result.append(ProductRow(name=name, revenue=_number(row.revenue), qty=_number(row.qty)))
    return result


def product_chart(rows: list[ProductRow], sort_key: ProductSortKey) -> list[NamedTotal]:
    """Revenue bars; the quantity ranking has no chart."""
    if sort_key != ProductSortKey.REVENUE:
        return []
    return [NamedTotal(name=row.name, total=row.revenue) for row in rows]


def customer_mix(counts: NewVsReturning) -> list[NamedValue]:
    return [
        NamedValue(name="New", value=_number(counts.new)),
        NamedValue(name="Returning", value=_number(counts.returning)),
    ]


def build_charts(dashboard: AggregatedDashboard, spec: AnalyticsQuerySpec) -> ChartSeries:
    """All chart series for one dashboard."""
    products = product_rows(dashboard.top_products)
    return ChartSeries(
        revenue_daily=revenue_series(dashboard.revenue_daily),
        status_breakdown=status_slices(dashboard.status_breakdown),
        top_customers=customer_totals(dashboard.top_customers),
        stockout_items=[stockout_item(record) for record in dashboard.stockouts],
        top_products=products,
        top_products_chart=product_chart(products, spec.product_sort_key),
        new_vs_returning=customer_mix(dashboard.new_vs_returning),
    )


def build_kpis(dashboard: AggregatedDashboard, stats: TenantStats) -> KpiSummary:
    """Headline numbers; revenue prefers the analytics total over tenant stats."""
    total_revenue = dashboard.revenue_total.total_revenue
    if total_revenue is None:
        total_revenue = stats.total_revenue
    rate = _number(dashboard.cancellation_rate.rate)
    return KpiSummary(
        total_revenue=_number(total_revenue),
        total_orders=stats.total_orders,
        total_customers=stats.total_customers,
        aov=_number(dashboard.aov.aov),
        upt=_number(dashboard.upt.upt),
        cancellation_rate=rate,
        cancellation_rate_percent=round(rate * 100, 1),
    )
