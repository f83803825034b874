import asyncio
import os
from datetime import datetime, timedelta, UTC

# Settings are read at import time
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("API_BASE_URL", "http://upstream.test")

import httpx
import pytest
from fastapi.testclient import TestClient

from insights_portal.clients.shopify_client import ShopifyClient
from insights_portal.clients.upstream_client import UpstreamClient
from insights_portal.core.credential_store import AUTH_COOKIE_NAME
from insights_portal.core.security import seal_credential
from insights_portal.dependencies import get_shopify_client, get_upstream_client
from insights_portal.main import app
from insights_portal.models.credential import Credential

UPSTREAM_BASE_URL = "http://upstream.test"
TENANT_ID = "t-1"

TENANT_ACCESS_BODY = {
    "accessId": 7,
    "tenantId": TENANT_ID,
    "shopDomain": "acme.myshopify.com",
    "shopName": "Acme Goods",
    "role": "owner",
    "isActive": True,
    "createdAt": "2026-01-15T09:30:00Z",
}

ANALYTICS_BODIES = {
    "/analytics/revenue": {"totalRevenue": 1234.5},
    "/analytics/revenue/daily": [
        {"date": "2026-10-01", "revenue": 100},
        {"date": "2026-10-02", "revenue": 250.5},
    ],
    "/analytics/orders/status-breakdown": [
        {"status": "paid", "count": 12},
        {"status": "refunded", "count": 1},
    ],
    "/analytics/customers/top": [
        {"customerId": 42, "totalSpent": 900, "firstName": "Ada", "lastName": "Lovelace"},
        {"customerId": 43, "totalSpent": 120},
    ],
    "/analytics/customers/stockout": [
        {"productId": "p-1", "title": "Blue Mug", "sku": "MUG-B", "available": 0},
        {"id": "p-2", "quantity": 2},
    ],
    "/analytics/aov": {"aov": 45.25, "orders": 27, "revenue": 1221.75, "discounts": 10},
    "/analytics/upt": {"upt": 1.8, "units": 49, "orders": 27},
    "/analytics/orders/cancellation-rate": {"cancelled": 2, "total": 30, "rate": 0.0667},
    "/analytics/products/top": [
        {"productId": 1, "title": "Blue Mug", "revenue": 300, "qty": 20},
        {"productId": 2, "revenue": 150, "qty": 5},
    ],
    "/analytics/customers/new-vs-returning": {"new": 8, "returning": 19},
}


class FakeUpstream:
    """
    Scripted upstream API served through httpx.MockTransport.

    Routes are keyed by (method, path); unknown routes answer 404.
    Every request is recorded in `calls`.
    """

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, method, path, status=200, json=None, text=None, delay=0.0, error=None):
        self.routes[(method.upper(), path)] = {
            "status": status,
            "json": json,
            "text": text,
            "delay": delay,
            "error": error,
        }

    def add_analytics(self, overrides=None):
        """Register every analytics endpoint, with per-path overrides."""
        for path, body in ANALYTICS_BODIES.items():
            self.add("GET", path, json=body)
        for path, route in (overrides or {}).items():
            self.add("GET", path, **route)

    def add_dashboard(self, tenant_id=TENANT_ID, overrides=None):
        self.add("GET", f"/tenant-access/tenant/{tenant_id}", json=TENANT_ACCESS_BODY)
        self.add(
            "GET",
            f"/tenant-access/tenant/{tenant_id}/stats",
            json={"tenantId": tenant_id, "totalRevenue": 999, "totalOrders": 27, "totalCustomers": 21},
        )
        self.add_analytics(overrides)

    def paths(self, method=None):
        return [c.url.path for c in self.calls if method is None or c.method == method]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": "Not found"})
        if route["delay"]:
            await asyncio.sleep(route["delay"])
        if route["error"] is not None:
            raise route["error"](f"scripted failure for {request.url.path}", request=request)
        if route["text"] is not None:
            return httpx.Response(route["status"], text=route["text"])
        if route["json"] is None:
            return httpx.Response(route["status"])
        return httpx.Response(route["status"], json=route["json"])

    def client(self, timeout=5.0) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=httpx.MockTransport(self.handler),
            base_url=UPSTREAM_BASE_URL,
            timeout=timeout,
        )


def create_credential(
    token: str = "upstream-token",
    display_name: str = "Ada Lovelace",
    expired: bool = False,
) -> Credential:
    """
    Build a credential for tests.

    Args:
        token: Upstream bearer token
        display_name: Name shown in the header bar
        expired: If True, the credential expired five minutes ago
    """
    now = datetime.now(UTC).replace(microsecond=0)
    if expired:
        return Credential(
            token=token,
            issued_at=now - timedelta(days=8),
            expires_at=now - timedelta(minutes=5),
            display_name=display_name,
        )
    return Credential.issue(token, display_name, lifetime_seconds=3600)


def create_session_cookie(**kwargs) -> str:
    """Sealed auth cookie value, as persist_credential would write it."""
    return seal_credential(create_credential(**kwargs))


def run(coro):
    """Drive an async service call from a synchronous test."""
    return asyncio.run(coro)


async def _with_upstream(fake, coro_factory):
    async with fake.client() as http:
        return await coro_factory(UpstreamClient(http))


def call_upstream(fake, coro_factory):
    """Run coro_factory(UpstreamClient) against the fake upstream."""
    return run(_with_upstream(fake, coro_factory))


@pytest.fixture
def fake_upstream():
    """Fresh scripted upstream for each test"""
    return FakeUpstream()


@pytest.fixture
def client(fake_upstream):
    """FastAPI test client wired to the fake upstream; redirects are not followed"""

    async def override_get_upstream_client():
        async with fake_upstream.client() as http:
            yield UpstreamClient(http)

    async def override_get_shopify_client():
        async with fake_upstream.client() as http:
            yield ShopifyClient(http, "2024-10")

    app.dependency_overrides[get_upstream_client] = override_get_upstream_client
    app.dependency_overrides[get_shopify_client] = override_get_shopify_client
    with TestClient(app, follow_redirects=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def session_cookie():
    """Valid sealed credential cookie"""
    return create_session_cookie()


@pytest.fixture
def auth_client(client, session_cookie):
    """Test client carrying a valid session cookie"""
    client.cookies.set(AUTH_COOKIE_NAME, session_cookie)
    return client
