import logging
from typing import Any
from urllib.parse import quote

from pydantic import TypeAdapter, ValidationError

from insights_portal.clients.shopify_client import ShopifyClient
from insights_portal.clients.upstream_client import UpstreamClient
from insights_portal.core.exceptions import (
    MalformedResponseException,
    UpstreamException,
    ValidationException,
)
from insights_portal.models.credential import Credential
from insights_portal.schemas.tenant_schemas import TenantAccess, TenantStats

logger = logging.getLogger(__name__)

_tenant_list_adapter = TypeAdapter(list[TenantAccess])


class TenantAccessService:
    """Service layer for the caller's tenant (connected store) records"""

    def __init__(self, upstream: UpstreamClient):
        self.upstream = upstream

    async def resolve(self, credential: Credential, tenant_id: str) -> TenantAccess:
        """
        Fetch the caller's access record for one tenant.

        Args:
            credential: Session credential
            tenant_id: Tenant to resolve

        Returns:
            TenantAccess for (caller, tenant)

        Raises:
            UnauthorizedException: On 401; the whole session is invalid
            UpstreamException: On any other non-success status
            MalformedResponseException: If the body is not a TenantAccess
            UnreachableException: If the upstream cannot be reached
        """
        body = await self.upstream.get(
            f"/tenant-access/tenant/{_path_segment(tenant_id)}", credential=credential
        )
        return _parse(TenantAccess, body)

    async def list_my_tenants(self, credential: Credential) -> list[TenantAccess]:
        """
        List every tenant the caller can access.

        Raises:
            UnauthorizedException: On 401
            UpstreamException: On any other failure
        """
        body = await self.upstream.get(
            "/tenant-access/my-tenants",
            credential=credential,
            failure_message="Failed to load tenants ({status}).",
        )
        try:
            return _tenant_list_adapter.validate_python(body)
        except ValidationError:
            raise MalformedResponseException("Unexpected response from server.")

    async def get_stats(self, credential: Credential, tenant_id: str) -> TenantStats:
        """
        Headline counters for a tenant.

        Any failure other than a 401 degrades to an empty TenantStats.
        """
        try:
            body = await self.upstream.get(
                f"/tenant-access/tenant/{_path_segment(tenant_id)}/stats", credential=credential
            )
            return _parse(TenantStats, body)
        except UpstreamException as e:
            logger.warning("Stats for tenant %s unavailable: %s", tenant_id, type(e).__name__)
            return TenantStats(tenant_id=str(tenant_id))

    async def onboard(
        self,
        credential: Credential,
        shop_domain: str,
        access_token: str,
        shopify: ShopifyClient,
    ) -> None:
        """
        Connect a Shopify store after checking its Admin API token.

        Raises:
            ValidationException: If a field is missing
            UpstreamException: If Shopify or the upstream API rejects the request
            UnauthorizedException: If the upstream API answers 401
        """
        shop_domain = (shop_domain or "").strip()
        access_token = (access_token or "").strip()
        if not shop_domain or not access_token:
            raise ValidationException("Shop domain and access token are required.")

        await shopify.verify_admin_token(shop_domain, access_token)

        await self.upstream.post(
            "/tenant-access/onboard",
            credential=credential,
            json={"shopDomain": shop_domain, "accessToken": access_token},
            failure_message="Onboarding failed ({status}).",
        )
        logger.info("Onboarded store %s", shop_domain)

    async def delete_tenant(self, credential: Credential, tenant_id: str) -> None:
        """
        Delete a tenant.

        Raises:
            ValidationException: If tenant_id is blank
            UpstreamException: If the upstream API refuses
            UnauthorizedException: If the upstream API answers 401
        """
        tenant_id = (tenant_id or "").strip()
        if not tenant_id:
            raise ValidationException("Missing tenant id.")

        await self.upstream.delete(
            f"/tenants/{_path_segment(tenant_id)}",
            credential=credential,
            failure_message="Failed to delete ({status}).",
        )
        logger.info("Deleted tenant %s", tenant_id)


def _path_segment(value: str) -> str:
    """Tenant ids are embedded as a single path segment."""
    return quote(str(value), safe="")


def _parse(model: type, body: Any) -> Any:
    try:
        return model.model_validate(body)
    except ValidationError:
        raise MalformedResponseException("Unexpected response from server.")
