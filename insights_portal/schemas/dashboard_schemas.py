"""Chart-ready shapes returned by the dashboard route."""

from pydantic import BaseModel, Field

from insights_portal.schemas.tenant_schemas import TenantAccess


class DatePoint(BaseModel):
    date: str
    total: float


class NamedTotal(BaseModel):
    name: str
    total: float


class NamedValue(BaseModel):
    name: str
    value: float


class StatusSlice(BaseModel):
    status: str
    count: int


class StockoutItem(BaseModel):
    id: str
    title: str
    sku: str | None = None
    qty: float = 0


class ProductRow(BaseModel):
    name: str
    revenue: float = 0
    qty: float = 0


class KpiSummary(BaseModel):
    total_revenue: float = 0
    total_orders: int | None = None
    total_customers: int | None = None
    aov: float = 0
    upt: float = 0
    cancellation_rate: float = 0
    cancellation_rate_percent: float = 0


class ChartSeries(BaseModel):
    """
    Minimal series per visualization.

    top_products_chart is only filled when products are ranked by revenue;
    the quantity ranking is shown as a list only.
    """

    revenue_daily: list[DatePoint] = Field(default_factory=list)
    status_breakdown: list[StatusSlice] = Field(default_factory=list)
    top_customers: list[NamedTotal] = Field(default_factory=list)
    stockout_items: list[StockoutItem] = Field(default_factory=list)
    top_products: list[ProductRow] = Field(default_factory=list)
    top_products_chart: list[NamedTotal] = Field(default_factory=list)
    new_vs_returning: list[NamedValue] = Field(default_factory=list)


class QuerySelection(BaseModel):
    """Effective query parameters after validation"""

    stock_limit: int
    prod_limit: int
    prod_by: str
    window_start: str
    window_end: str


class DashboardResponse(BaseModel):
    access: TenantAccess
    title: str
    kpis: KpiSummary
    charts: ChartSeries
    query: QuerySelection
    display_name: str | None = None
