from collections.abc import AsyncIterator

import httpx
from fastapi import Request

from insights_portal.clients.shopify_client import ShopifyClient
from insights_portal.clients.upstream_client import UpstreamClient
from insights_portal.config import settings
from insights_portal.core.credential_store import read_credential
from insights_portal.core.exceptions import ConfigurationException, UnauthorizedException
from insights_portal.models.credential import Credential


async def get_upstream_client() -> AsyncIterator[UpstreamClient]:
    """
    FastAPI dependency yielding a client for the upstream API.

    One httpx.AsyncClient per request, closed afterwards.

    Raises:
        ConfigurationException: If API_BASE_URL is not configured
    """
    base_url = settings.api_base_url
    if not base_url:
        raise ConfigurationException("API base URL is not configured. Set API_BASE_URL in .env.")

    async with httpx.AsyncClient(
        base_url=base_url,
        timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
    ) as http:
        yield UpstreamClient(http)


async def get_shopify_client() -> AsyncIterator[ShopifyClient]:
    """FastAPI dependency yielding a client for Shopify token checks."""
    async with httpx.AsyncClient(timeout=settings.UPSTREAM_TIMEOUT_SECONDS) as http:
        yield ShopifyClient(http, settings.SHOPIFY_API_VERSION)


async def get_credential(request: Request) -> Credential:
    """
    FastAPI dependency returning the session credential.

    The session guard middleware already redirects anonymous visitors away
    from protected pages; this covers routes outside the protected prefixes
    and cookies that expired mid-request.

    Raises:
        UnauthorizedException: If no verifiable credential is present
    """
    credential = read_credential(request)
    if credential is None:
        raise UnauthorizedException("Not authenticated.")
    return credential
