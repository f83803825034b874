import logging
from typing import Any

from pydantic import ValidationError
from starlette.responses import Response

from insights_portal.clients.upstream_client import UpstreamClient
from insights_portal.config import settings
from insights_portal.core.credential_store import clear_credential
from insights_portal.core.exceptions import MalformedResponseException, ValidationException
from insights_portal.models.credential import Credential
from insights_portal.schemas.auth_schemas import AuthResponse

logger = logging.getLogger(__name__)


def display_name_for(first_name: str | None, last_name: str | None, email: str) -> str:
    """'First Last' when either part is present, otherwise the email."""
    name = " ".join(part.strip() for part in (first_name, last_name) if part and part.strip())
    return name or email


class AuthService:
    """
    Login, registration and logout against the upstream auth endpoints.

    Stateless: login and register return a Credential and leave persisting
    it to the caller.
    """

    def __init__(self, upstream: UpstreamClient):
        self.upstream = upstream

    async def login(self, email: str, password: str) -> Credential:
        """
        Exchange email and password for a credential.

        Raises:
            ValidationException: If a field is missing (no request is sent)
            UpstreamException: If the upstream answers with a non-success status
            MalformedResponseException: If the success body lacks accessToken/email
            UnreachableException: If the upstream cannot be reached
        """
        email = (email or "").strip()
        password = password or ""
        if not email or not password:
            raise ValidationException("Please enter both email and password.")

        body = await self.upstream.post(
            "/auth/login",
            json={"email": email, "password": password},
            failure_message="Login failed ({status}).",
            escalate_unauthorized=False,
        )
        credential = self._credential_from(body)
        logger.info("Login succeeded for %s", email)
        return credential

    async def register(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        confirm: str,
    ) -> Credential:
        """
        Create an account and return its credential.

        Raises:
            ValidationException: If a field is missing or passwords differ
                (no request is sent)
            UpstreamException: If the upstream answers with a non-success status
            MalformedResponseException: If the success body lacks accessToken/email
            UnreachableException: If the upstream cannot be reached
        """
        first_name = (first_name or "").strip()
        last_name = (last_name or "").strip()
        email = (email or "").strip()
        password = password or ""
        confirm = confirm or ""

        if not first_name or not last_name or not email or not password or not confirm:
            raise ValidationException("All fields are required.")
        if password != confirm:
            raise ValidationException("Passwords do not match.")

        body = await self.upstream.post(
            "/auth/register",
            json={
                "firstName": first_name,
                "lastName": last_name,
                "email": email,
                "password": password,
            },
            failure_message="Registration failed ({status}).",
            escalate_unauthorized=False,
        )
        credential = self._credential_from(body)
        logger.info("Registration succeeded for %s", email)
        return credential

    @staticmethod
    def logout(response: Response) -> None:
        """
        Invalidate the stored credential on the outgoing response.

        Best-effort: failures are logged, never raised.
        """
        try:
            clear_credential(response)
        except Exception:
            logger.warning("Failed to clear credential cookies", exc_info=True)

    @staticmethod
    def _credential_from(body: Any) -> Credential:
        try:
            auth = AuthResponse.model_validate(body)
        except ValidationError:
            raise MalformedResponseException("Unexpected response from server.")
        if not auth.access_token:
            raise MalformedResponseException("Invalid response from server: missing token.")

        return Credential.issue(
            token=auth.access_token,
            display_name=display_name_for(auth.first_name, auth.last_name, auth.email),
            lifetime_seconds=settings.SESSION_MAX_AGE_SECONDS,
        )
