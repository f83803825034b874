import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, Query, Request, status
from fastapi.responses import RedirectResponse

from insights_portal.clients.shopify_client import ShopifyClient
from insights_portal.clients.upstream_client import UpstreamClient
from insights_portal.core.credential_store import read_display_name
from insights_portal.core.exceptions import UpstreamException, ValidationException
from insights_portal.dependencies import get_credential, get_shopify_client, get_upstream_client
from insights_portal.models.credential import Credential
from insights_portal.schemas.dashboard_schemas import DashboardResponse
from insights_portal.schemas.tenant_schemas import TenantListResponse
from insights_portal.services.dashboard_service import DashboardService
from insights_portal.services.query_validator import validate_query
from insights_portal.services.tenant_access_service import TenantAccessService

logger = logging.getLogger(__name__)

router = APIRouter()

TENANTS_PATH = "/tenants"


def _back_to_list(error: str | None = None) -> RedirectResponse:
    url = f"{TENANTS_PATH}?{urlencode({'error': error})}" if error else TENANTS_PATH
    return RedirectResponse(url=url, status_code=status.HTTP_303_SEE_OTHER)


@router.get("", response_model=TenantListResponse)
async def list_tenants(
    request: Request,
    error: str | None = Query(default=None),
    credential: Credential = Depends(get_credential),
    upstream: UpstreamClient = Depends(get_upstream_client),
):
    """
    List the stores the signed-in user can open.

    A failed lookup is reported in `error` next to an empty list;
    a 401 ends the session instead.
    """
    service = TenantAccessService(upstream)
    try:
        tenants = await service.list_my_tenants(credential)
    except UpstreamException as e:
        logger.warning("Tenant list unavailable: %s", e.message)
        tenants, error = [], e.message

    return TenantListResponse(
        tenants=tenants,
        error=error,
        display_name=credential.display_name or read_display_name(request),
    )


@router.post("/onboard")
async def onboard_tenant(
    shop_domain: str = Form("", alias="shopDomain"),
    access_token: str = Form("", alias="accessToken"),
    credential: Credential = Depends(get_credential),
    upstream: UpstreamClient = Depends(get_upstream_client),
    shopify: ShopifyClient = Depends(get_shopify_client),
):
    """
    Connect a Shopify store.

    - The Admin API token is checked against Shopify first
    - Always answers 303 to the tenant list, with `?error=` on failure
    """
    service = TenantAccessService(upstream)
    try:
        await service.onboard(credential, shop_domain, access_token, shopify)
    except (ValidationException, UpstreamException) as e:
        return _back_to_list(str(e))
    return _back_to_list()


@router.post("/delete")
async def delete_tenant(
    tenant_id: str = Form("", alias="tenantId"),
    credential: Credential = Depends(get_credential),
    upstream: UpstreamClient = Depends(get_upstream_client),
):
    """Delete a store and return to the tenant list."""
    service = TenantAccessService(upstream)
    try:
        await service.delete_tenant(credential, tenant_id)
    except (ValidationException, UpstreamException) as e:
        return _back_to_list(str(e))
    return _back_to_list()


@router.get("/{tenant_id}", response_model=DashboardResponse)
async def tenant_dashboard(
    tenant_id: str,
    request: Request,
    credential: Credential = Depends(get_credential),
    upstream: UpstreamClient = Depends(get_upstream_client),
):
    """
    Dashboard payload for one tenant.

    Query parameters `stockLimit`, `prodLimit` and `prodBy` are optional;
    invalid values fall back to their defaults rather than failing.
    """
    raw_params = {key: request.query_params.getlist(key) for key in request.query_params.keys()}
    spec = validate_query(tenant_id, raw_params)

    service = DashboardService(upstream)
    return await service.build(credential, spec)
