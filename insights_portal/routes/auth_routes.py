from fastapi import APIRouter, Depends, Form, Query, status
from fastapi.responses import RedirectResponse

from insights_portal.clients.upstream_client import UpstreamClient
from insights_portal.core.credential_store import persist_credential
from insights_portal.dependencies import get_upstream_client
from insights_portal.schemas.auth_schemas import AuthPageResponse
from insights_portal.services.auth_service import AuthService
from insights_portal.services.session_guard import HOME_PATH, LOGIN_PATH, safe_next_path

router = APIRouter()


@router.get("/login", response_model=AuthPageResponse)
async def login_page(next_path: str | None = Query(default=None, alias="next")):
    """Context for the sign-in form. Signed-in visitors are redirected home by the guard."""
    return AuthPageResponse(page="login", next=next_path)


@router.get("/register", response_model=AuthPageResponse)
async def register_page():
    """Context for the registration form."""
    return AuthPageResponse(page="register")


@router.post("/login")
async def login(
    email: str = Form(""),
    password: str = Form(""),
    upstream: UpstreamClient = Depends(get_upstream_client),
):
    """
    Sign in and store the credential.

    - Missing fields: 400 before any upstream call
    - Success: cookies set, 303 to the application root
    """
    service = AuthService(upstream)
    credential = await service.login(email, password)

    response = RedirectResponse(url=HOME_PATH, status_code=status.HTTP_303_SEE_OTHER)
    persist_credential(response, credential)
    return response


@router.post("/register")
async def register(
    first_name: str = Form("", alias="firstName"),
    last_name: str = Form("", alias="lastName"),
    email: str = Form(""),
    password: str = Form(""),
    confirm: str = Form(""),
    upstream: UpstreamClient = Depends(get_upstream_client),
):
    """
    Create an account and store its credential.

    - Missing fields or mismatched passwords: 400 before any upstream call
    - Success: cookies set, 303 to the application root
    """
    service = AuthService(upstream)
    credential = await service.register(first_name, last_name, email, password, confirm)

    response = RedirectResponse(url=HOME_PATH, status_code=status.HTTP_303_SEE_OTHER)
    persist_credential(response, credential)
    return response


@router.post("/logout")
async def logout(next_path: str = Form("", alias="next")):
    """Clear the credential and go to the login page, or to a local `next` path."""
    response = RedirectResponse(
        url=safe_next_path(next_path, default=LOGIN_PATH),
        status_code=status.HTTP_303_SEE_OTHER,
    )
    AuthService.logout(response)
    return response
