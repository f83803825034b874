"""
Cookie persistence for the session credential.

This module is the only place that reads or writes credential cookies;
everything past the request boundary receives an explicit Credential.
"""

import logging
from urllib.parse import quote, unquote

from starlette.requests import Request
from starlette.responses import Response

from insights_portal.config import settings
from insights_portal.core.exceptions import UnauthorizedException
from insights_portal.core.security import open_credential, seal_credential
from insights_portal.models.credential import Credential

logger = logging.getLogger(__name__)

AUTH_COOKIE_NAME = "auth_token"
DISPLAY_NAME_COOKIE_NAME = "display_name"


def read_credential(request: Request) -> Credential | None:
    """Return the request's credential, or None if absent or not verifiable."""
    sealed = request.cookies.get(AUTH_COOKIE_NAME)
    if not sealed:
        return None
    try:
        return open_credential(sealed)
    except UnauthorizedException as e:
        logger.info("Ignoring unusable session cookie: %s", e)
        return None


def read_display_name(request: Request) -> str | None:
    """Display name cookie, URL-decoded. Rendering hint only, never trusted."""
    raw = request.cookies.get(DISPLAY_NAME_COOKIE_NAME)
    return unquote(raw) if raw else None


def persist_credential(response: Response, credential: Credential) -> None:
    """Write the sealed credential and the display name cookie."""
    response.set_cookie(
        key=AUTH_COOKIE_NAME,
        value=seal_credential(credential),
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        path="/",
        secure=settings.is_production,
        httponly=True,
        samesite="lax",
    )
    response.set_cookie(
        key=DISPLAY_NAME_COOKIE_NAME,
        value=quote(credential.display_name, safe=""),
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        path="/",
        secure=settings.is_production,
        httponly=False,
        samesite="lax",
    )


def clear_credential(response: Response) -> None:
    """Expire both credential cookies immediately."""
    response.delete_cookie(
        key=AUTH_COOKIE_NAME,
        path="/",
        secure=settings.is_production,
        httponly=True,
        samesite="lax",
    )
    response.delete_cookie(
        key=DISPLAY_NAME_COOKIE_NAME,
        path="/",
        secure=settings.is_production,
        httponly=False,
        samesite="lax",
    )
