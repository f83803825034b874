"""Upstream analytics payloads, one model per metric endpoint."""

from typing import Any

from pydantic import BaseModel, Field, model_validator

from insights_portal.schemas.tenant_schemas import UPSTREAM_MODEL_CONFIG


class MetricRecord(BaseModel):
    """
    Base for upstream metric rows.

    A null field takes its declared default, so one bad value in a row
    zeroes that value instead of failing the whole metric.
    """

    model_config = UPSTREAM_MODEL_CONFIG

    @model_validator(mode="before")
    @classmethod
    def drop_null_fields(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class RevenueTotal(MetricRecord):
    total_revenue: float | None = None


class DailyRevenue(MetricRecord):
    date: str = ""
    revenue: float = 0


class StatusCount(MetricRecord):
    status: str = ""
    count: int = 0


class CustomerSpend(MetricRecord):
    customer_id: str | None = None
    total_spent: float = 0
    first_name: str | None = None
    last_name: str | None = None


class AovSummary(MetricRecord):
    aov: float = 0
    orders: int = 0
    revenue: float = 0
    discounts: float = 0


class UptSummary(MetricRecord):
    upt: float = 0
    units: int = 0
    orders: int = 0


class CancellationSummary(MetricRecord):
    cancelled: int = 0
    total: int = 0
    rate: float = 0


class ProductSales(MetricRecord):
    product_id: str | None = None
    title: str | None = None
    revenue: float | None = None
    qty: float | None = None


class NewVsReturning(MetricRecord):
    new: int = 0
    returning: int = 0


class AggregatedDashboard(BaseModel):
    """
    Fan-in of the ten analytics calls.

    Every field is always populated, either with the upstream value or with
    that metric's fallback default, so renderers only ever branch on empty
    or zero values.
    """

    revenue_total: RevenueTotal = Field(default_factory=lambda: RevenueTotal(total_revenue=0))
    revenue_daily: list[DailyRevenue] = Field(default_factory=list)
    status_breakdown: list[StatusCount] = Field(default_factory=list)
    top_customers: list[CustomerSpend] = Field(default_factory=list)
    stockouts: list[dict[str, Any]] = Field(default_factory=list)
    aov: AovSummary = Field(default_factory=AovSummary)
    upt: UptSummary = Field(default_factory=UptSummary)
    cancellation_rate: CancellationSummary = Field(default_factory=CancellationSummary)
    top_products: list[ProductSales] = Field(default_factory=list)
    new_vs_returning: NewVsReturning = Field(default_factory=NewVsReturning)
