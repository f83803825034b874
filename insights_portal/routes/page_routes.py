from fastapi import APIRouter, Request, status
from fastapi.responses import RedirectResponse

from insights_portal.core.credential_store import read_credential
from insights_portal.services.session_guard import LOGIN_PATH

router = APIRouter()


@router.get("/")
async def root(request: Request):
    """Send signed-in visitors to their stores and everyone else to the login page."""
    target = "/tenants" if read_credential(request) is not None else LOGIN_PATH
    return RedirectResponse(url=target, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
