"""Pre-flight check of Shopify Admin API tokens before onboarding a store."""

import json
import logging
from typing import Any

import httpx

from insights_portal.core.exceptions import UnreachableException, UpstreamException

logger = logging.getLogger(__name__)


def normalize_shop_domain(domain: str) -> str:
    """Lower-case the domain and strip any scheme and trailing slashes."""
    normalized = domain.strip().lower()
    for scheme in ("https://", "http://"):
        if normalized.startswith(scheme):
            normalized = normalized[len(scheme):]
            break
    return normalized.rstrip("/")


def _stringify(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    if value:
        try:
            return json.dumps(value)
        except (TypeError, ValueError):
            return None
    return None


def _pick_error_message(body: Any) -> str | None:
    """Shopify reports failures under 'errors', 'error' or 'message'."""
    if not isinstance(body, dict):
        return None
    message = body.get("message")
    return (
        _stringify(body.get("errors"))
        or _stringify(body.get("error"))
        or (message if isinstance(message, str) else None)
    )


class ShopifyClient:
    """Validates a store's Admin API access token against Shopify itself"""

    def __init__(self, http: httpx.AsyncClient, api_version: str):
        self.http = http
        self.api_version = api_version

    async def verify_admin_token(self, shop_domain: str, access_token: str) -> None:
        """
        Confirm the token can read the shop resource.

        Args:
            shop_domain: Store domain as typed by the user
            access_token: Admin API access token

        Raises:
            UpstreamException: If Shopify rejects the token
            UnreachableException: If Shopify cannot be reached
        """
        domain = normalize_shop_domain(shop_domain)
        url = f"https://{domain}/admin/api/{self.api_version}/shop.json"
        try:
            response = await self.http.get(
                url,
                headers={"Accept": "application/json", "X-Shopify-Access-Token": access_token},
            )
        except httpx.RequestError as e:
            logger.warning("Shopify unreachable for %s: %s", domain, type(e).__name__)
            raise UnreachableException("Unable to reach Shopify. Check the shop domain and token.") from e

        if response.is_success:
            return

        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            try:
                message = _pick_error_message(response.json())
            except ValueError:
                message = None
        else:
            message = response.text.strip() or None

        logger.info("Shopify rejected token for %s with status %s", domain, response.status_code)
        raise UpstreamException(
            message or f"Shopify token validation failed ({response.status_code}).",
            status=response.status_code,
        )
