"""
Concurrent fan-out over the ten analytics endpoints.

Each metric call either yields its parsed value or, on any failure other
than a 401, its fallback default. A 401 from any call invalidates the whole
aggregation: the remaining calls are cancelled and nothing partial is
returned.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from pydantic import TypeAdapter, ValidationError

from insights_portal.clients.upstream_client import UpstreamClient
from insights_portal.core.exceptions import UnauthorizedException, UpstreamException
from insights_portal.models.analytics_query import AnalyticsQuerySpec
from insights_portal.models.credential import Credential
from insights_portal.schemas.analytics_schemas import (
    AggregatedDashboard,
    AovSummary,
    CancellationSummary,
    CustomerSpend,
    DailyRevenue,
    NewVsReturning,
    ProductSales,
    RevenueTotal,
    StatusCount,
    UptSummary,
)

logger = logging.getLogger(__name__)

TOP_CUSTOMERS_LIMIT = 5


@dataclass(frozen=True)
class MetricQuery:
    """
    One analytics call.

    Attributes:
        metric: AggregatedDashboard field the result fills
        path: Upstream endpoint
        params: Query parameters
        adapter: Parses the JSON body; a parse failure counts as malformed
        default: Builds the fallback value (a fresh object per call)
    """

    metric: str
    path: str
    adapter: TypeAdapter
    default: Callable[[], Any]
    params: dict[str, Any] = field(default_factory=dict)


def build_metric_queries(spec: AnalyticsQuerySpec) -> list[MetricQuery]:
    """The ten analytics calls for one dashboard, in display order."""
    window = {
        "start": spec.window_start.isoformat(),
        "end": spec.window_end.isoformat(),
    }
    days = {
        "start": spec.window_start.date().isoformat(),
        "end": spec.window_end.date().isoformat(),
    }
    return [
        MetricQuery(
            "revenue_total",
            "/analytics/revenue",
            TypeAdapter(RevenueTotal),
            lambda: RevenueTotal(total_revenue=0),
            window,
        ),
        MetricQuery("revenue_daily", "/analytics/revenue/daily", TypeAdapter(list[DailyRevenue]), list, days),
        MetricQuery("status_breakdown", "/analytics/orders/status-breakdown", TypeAdapter(list[StatusCount]), list),
        MetricQuery(
            "top_customers",
            "/analytics/customers/top",
            TypeAdapter(list[CustomerSpend]),
            list,
            {"limit": TOP_CUSTOMERS_LIMIT},
        ),
        MetricQuery(
            "stockouts",
            "/analytics/customers/stockout",
            TypeAdapter(list[dict[str, Any]]),
            list,
            {"limit": spec.stock_limit},
        ),
        MetricQuery("aov", "/analytics/aov", TypeAdapter(AovSummary), AovSummary, window),
        MetricQuery("upt", "/analytics/upt", TypeAdapter(UptSummary), UptSummary, window),
        MetricQuery(
            "cancellation_rate",
            "/analytics/orders/cancellation-rate",
            TypeAdapter(CancellationSummary),
            CancellationSummary,
            window,
        ),
        MetricQuery(
            "top_products",
            "/analytics/products/top",
            TypeAdapter(list[ProductSales]),
            list,
            {"by": spec.product_sort_key.value, "limit": spec.product_limit, **window},
        ),
        MetricQuery(
            "new_vs_returning",
            "/analytics/customers/new-vs-returning",
            TypeAdapter(NewVsReturning),
            NewVsReturning,
            window,
        ),
    ]


class AnalyticsAggregator:
    """Fans the analytics calls out concurrently and folds them into one result"""

    def __init__(self, upstream: UpstreamClient):
        self.upstream = upstream

    async def aggregate(self, credential: Credential, spec: AnalyticsQuerySpec) -> AggregatedDashboard:
        """
        Run every metric call concurrently and collect the results.

        Waits until every call has settled (value or fallback), unless a call
        observes a 401 first: then the still-running calls are cancelled and
        the 401 is raised. Fallback defaults computed before that point are
        discarded with the rest.

        Args:
            credential: Session credential, read once for all calls
            spec: Validated query parameters

        Returns:
            AggregatedDashboard with every metric present

        Raises:
            UnauthorizedException: If any call answered 401
        """
        tasks = {
            asyncio.create_task(self._fetch_metric(credential, spec.tenant_id, query)): query.metric
            for query in build_metric_queries(spec)
        }
        results: dict[str, Any] = {}
        pending = set(tasks)
        try:
            while pending:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_EXCEPTION)
                # Read every settled task so no exception goes unretrieved
                errors = [task.exception() for task in done]
                failed = [error for error in errors if error is not None]
                if failed:
                    raise failed[0]
                for task in done:
                    results[tasks[task]] = task.result()
        except UnauthorizedException:
            logger.warning("Analytics for tenant %s rejected with 401; session invalid", spec.tenant_id)
            raise
        finally:
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        return AggregatedDashboard(**results)

    async def _fetch_metric(self, credential: Credential, tenant_id: str, query: MetricQuery) -> Any:
        """One call with its fallback policy. Only UnauthorizedException escapes."""
        try:
            body = await self.upstream.get(
                query.path,
                credential=credential,
                tenant_id=tenant_id,
                params=query.params,
            )
            return query.adapter.validate_python(body)
        except UpstreamException as e:
            logger.warning(
                "Metric %s fell back to default: %s (status=%s)",
                query.metric,
                type(e).__name__,
                e.status,
            )
        except ValidationError:
            logger.warning("Metric %s fell back to default: malformed body", query.metric)
        return query.default()
