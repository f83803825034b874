"""
Route protection decision.

Pure functions only: no cookies, no network. main.py reads the credential
and turns the SessionDecision into an HTTP response.
"""

from urllib.parse import urlencode

from insights_portal.models.session_decision import (
    Continue,
    RedirectToHome,
    RedirectToLogin,
    SessionDecision,
)

LOGIN_PATH = "/login"
HOME_PATH = "/"

# Pages only meaningful without a session
PUBLIC_ONLY_PATHS = ("/login", "/register")

# Sections that require a session
PROTECTED_PREFIXES = ("/dashboard", "/analytics", "/tenants", "/events")

# Framework internals and static assets; never guarded
EXCLUDED_PREFIXES = ("/static", "/docs", "/redoc", "/openapi.json", "/favicon.ico", "/health")


def _matches(path: str, rules: tuple[str, ...]) -> bool:
    return any(path == rule or path.startswith(f"{rule}/") for rule in rules)


def _path_only(path: str) -> str:
    return path.split("?", 1)[0]


def is_excluded(path: str) -> bool:
    """True for paths the guard must not even look at."""
    return _matches(_path_only(path), EXCLUDED_PREFIXES)


def is_public_only(path: str) -> bool:
    return _matches(_path_only(path), PUBLIC_ONLY_PATHS)


def is_protected(path: str) -> bool:
    return _matches(_path_only(path), PROTECTED_PREFIXES)


def decide(path: str, has_valid_credential: bool) -> SessionDecision:
    """
    Decide what happens to a request before it reaches its route.

    | credential | path class  | decision                         |
    |------------|-------------|----------------------------------|
    | valid      | public-only | RedirectToHome                   |
    | missing    | protected   | RedirectToLogin(path + query)    |
    | otherwise  |             | Continue                         |

    Args:
        path: Requested path, including its query string if any
        has_valid_credential: Whether a verifiable credential accompanies it

    Returns:
        The SessionDecision for this request
    """
    if is_excluded(path):
        return Continue()
    if has_valid_credential and is_public_only(path):
        return RedirectToHome()
    if not has_valid_credential and is_protected(path):
        return RedirectToLogin(return_path=path)
    return Continue()


def login_url(return_path: str | None = None) -> str:
    """Login page URL carrying the return path as ?next=."""
    if not return_path:
        return LOGIN_PATH
    return f"{LOGIN_PATH}?{urlencode({'next': return_path})}"


def safe_next_path(next_path: str | None, default: str = LOGIN_PATH) -> str:
    """Honor a post-logout target only when it is a local absolute path."""
    if next_path and next_path.startswith("/") and not next_path.startswith("//"):
        return next_path
    return default
