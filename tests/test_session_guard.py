from urllib.parse import parse_qs, urlparse

import pytest

from insights_portal.core.credential_store import AUTH_COOKIE_NAME
from insights_portal.models.session_decision import Continue, RedirectToHome, RedirectToLogin
from insights_portal.services.session_guard import decide, is_excluded, login_url, safe_next_path
from tests.conftest import create_session_cookie


def _next_param(location: str) -> str:
    return parse_qs(urlparse(location).query)["next"][0]


class TestDecide:
    """Pure route-protection decision"""

    @pytest.mark.parametrize("path", ["/tenants", "/tenants/t-1", "/dashboard", "/analytics/x", "/events"])
    def test_protected_without_credential_redirects_to_login(self, path):
        assert decide(path, has_valid_credential=False) == RedirectToLogin(return_path=path)

    def test_return_path_keeps_query_string(self):
        decision = decide("/tenants/t-1?prodBy=quantity&stockLimit=20", has_valid_credential=False)
        assert decision == RedirectToLogin(return_path="/tenants/t-1?prodBy=quantity&stockLimit=20")

    @pytest.mark.parametrize("path", ["/login", "/register", "/login?next=%2Ftenants"])
    def test_public_only_with_credential_redirects_home(self, path):
        assert decide(path, has_valid_credential=True) == RedirectToHome()

    @pytest.mark.parametrize("path", ["/login", "/register", "/", "/logout"])
    def test_public_paths_without_credential_continue(self, path):
        assert decide(path, has_valid_credential=False) == Continue()

    def test_protected_with_credential_continues(self):
        assert decide("/tenants", has_valid_credential=True) == Continue()

    def test_prefix_match_is_segment_based(self):
        """/tenantsXYZ is not under /tenants"""
        assert decide("/tenantsXYZ", has_valid_credential=False) == Continue()
        assert decide("/loginx", has_valid_credential=True) == Continue()

    @pytest.mark.parametrize("path", ["/static/app.css", "/docs", "/openapi.json", "/favicon.ico", "/health"])
    def test_excluded_paths_always_continue(self, path):
        assert is_excluded(path)
        assert decide(path, has_valid_credential=False) == Continue()
        assert decide(path, has_valid_credential=True) == Continue()


def test_login_url_encodes_return_path():
    url = login_url("/tenants/t-1?prodBy=quantity")
    assert url.startswith("/login?next=")
    assert _next_param(url) == "/tenants/t-1?prodBy=quantity"


def test_login_url_without_return_path():
    assert login_url() == "/login"


@pytest.mark.parametrize(
    "candidate,expected",
    [
        ("/tenants", "/tenants"),
        ("//evil.example.com", "/login"),
        ("https://evil.example.com", "/login"),
        ("", "/login"),
        (None, "/login"),
    ],
)
def test_safe_next_path(candidate, expected):
    assert safe_next_path(candidate) == expected


class TestGuardMiddleware:
    """Session guard as installed on the application"""

    def test_anonymous_tenant_list_redirects_to_login(self, client, fake_upstream):
        response = client.get("/tenants")
        assert response.status_code == 307
        assert _next_param(response.headers["location"]) == "/tenants"
        assert fake_upstream.calls == []

    def test_anonymous_dashboard_keeps_query_in_next(self, client):
        response = client.get("/tenants/t-1?prodBy=quantity&stockLimit=20")
        assert response.status_code == 307
        assert _next_param(response.headers["location"]) == "/tenants/t-1?prodBy=quantity&stockLimit=20"

    def test_signed_in_login_page_redirects_home(self, auth_client):
        response = auth_client.get("/login")
        assert response.status_code == 307
        assert response.headers["location"] == "/"

    def test_anonymous_login_page_is_served(self, client):
        response = client.get("/login?next=/tenants")
        assert response.status_code == 200
        assert response.json() == {"page": "login", "next": "/tenants"}

    def test_register_page_is_served(self, client):
        response = client.get("/register")
        assert response.status_code == 200
        assert response.json()["page"] == "register"

    def test_tampered_cookie_is_treated_as_missing_and_cleared(self, client):
        client.cookies.set(AUTH_COOKIE_NAME, create_session_cookie() + "x")
        response = client.get("/tenants")
        assert response.status_code == 307
        assert response.headers["location"].startswith("/login")
        assert f'{AUTH_COOKIE_NAME}=""' in response.headers.get("set-cookie", "")

    def test_expired_cookie_redirects_to_login(self, client):
        client.cookies.set(AUTH_COOKIE_NAME, create_session_cookie(expired=True))
        response = client.get("/tenants")
        assert response.status_code == 307

    def test_health_is_not_guarded(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_security_headers_on_every_response(self, client):
        for response in (client.get("/health"), client.get("/tenants")):
            assert response.headers["x-frame-options"] == "DENY"
            assert response.headers["x-content-type-options"] == "nosniff"
            assert response.headers["referrer-policy"] == "origin-when-cross-origin"


class TestHome:
    """GET / sends visitors where they belong"""

    def test_anonymous_goes_to_login(self, client):
        response = client.get("/")
        assert response.status_code == 307
        assert response.headers["location"] == "/login"

    def test_signed_in_goes_to_tenants(self, auth_client):
        response = auth_client.get("/")
        assert response.status_code == 307
        assert response.headers["location"] == "/tenants"
