from insights_portal.clients.upstream_client import UpstreamClient
from insights_portal.models.analytics_query import AnalyticsQuerySpec
from insights_portal.models.credential import Credential
from insights_portal.schemas.dashboard_schemas import DashboardResponse, QuerySelection
from insights_portal.services.analytics_aggregator import AnalyticsAggregator
from insights_portal.services.dashboard_transformer import build_charts, build_kpis
from insights_portal.services.tenant_access_service import TenantAccessService


class DashboardService:
    """Assembles one tenant dashboard: access, stats, analytics, charts"""

    def __init__(self, upstream: UpstreamClient):
        self.access_service = TenantAccessService(upstream)
        self.aggregator = AnalyticsAggregator(upstream)

    async def build(self, credential: Credential, spec: AnalyticsQuerySpec) -> DashboardResponse:
        """
        Build the dashboard payload for spec.tenant_id.

        The access lookup runs first and fails fast; analytics are only
        requested for a tenant the caller can see.

        Raises:
            UnauthorizedException: If any upstream call answered 401
            UpstreamException: If the access lookup itself failed
        """
        access = await self.access_service.resolve(credential, spec.tenant_id)
        stats = await self.access_service.get_stats(credential, spec.tenant_id)
        dashboard = await self.aggregator.aggregate(credential, spec)

        return DashboardResponse(
            access=access,
            title=access.title,
            kpis=build_kpis(dashboard, stats),
            charts=build_charts(dashboard, spec),
            query=QuerySelection(
                stock_limit=spec.stock_limit,
                prod_limit=spec.product_limit,
                prod_by=spec.product_sort_key.value,
                window_start=spec.window_start.isoformat(),
                window_end=spec.window_end.isoformat(),
            ),
            display_name=credential.display_name or None,
        )
