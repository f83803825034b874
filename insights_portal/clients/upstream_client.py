"""HTTP client for the upstream analytics REST API."""

import logging
from typing import Any

import httpx

from insights_portal.core.exceptions import (
    MalformedResponseException,
    UnauthorizedException,
    UnreachableException,
    UpstreamException,
)
from insights_portal.models.credential import Credential

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_MESSAGE = "Request failed ({status})."
UNREACHABLE_MESSAGE = "Unable to reach the server. Please try again."
TENANT_HEADER = "X-Tenant-ID"


def _json_body(response: httpx.Response) -> Any:
    """
    Decoded JSON body, or None when the response is not JSON.

    Raises:
        MalformedResponseException: If the body claims to be JSON but is not
    """
    content_type = response.headers.get("content-type", "")
    if "application/json" not in content_type:
        return None
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        raise MalformedResponseException(
            "Unexpected response from server.", status=response.status_code
        )


def classify_response(
    response: httpx.Response,
    failure_message: str = DEFAULT_FAILURE_MESSAGE,
    escalate_unauthorized: bool = True,
) -> Any:
    """
    Turn an upstream response into its JSON body or a typed exception.

    Every upstream call goes through here so 401 handling lives in one place.

    Args:
        response: Upstream response
        failure_message: Template used when the body carries no message;
            "{status}" is replaced with the status code
        escalate_unauthorized: When False a 401 is an ordinary failure
            (auth endpoints answer 401 for wrong passwords)

    Returns:
        Decoded JSON body, or None for empty / non-JSON success responses

    Raises:
        UnauthorizedException: On 401 when escalate_unauthorized is set
        UpstreamException: On any other non-success status
        MalformedResponseException: On a success status with undecodable JSON
    """
    status = response.status_code
    if status == 401 and escalate_unauthorized:
        raise UnauthorizedException("Upstream rejected the session credential (401).")

    if not response.is_success:
        try:
            data = _json_body(response)
        except MalformedResponseException:
            data = None
        message = data.get("message") if isinstance(data, dict) else None
        if not isinstance(message, str) or not message:
            message = failure_message.format(status=status)
        raise UpstreamException(message, status=status)

    return _json_body(response)


class UpstreamClient:
    """Thin wrapper over httpx.AsyncClient that speaks the upstream contract"""

    def __init__(self, http: httpx.AsyncClient):
        self.http = http

    async def request(
        self,
        method: str,
        path: str,
        *,
        credential: Credential | None = None,
        tenant_id: str | None = None,
        params: dict[str, Any] | None = None,
        json: Any = None,
        failure_message: str = DEFAULT_FAILURE_MESSAGE,
        escalate_unauthorized: bool = True,
    ) -> Any:
        """
        Send one request and classify the response.

        Args:
            method: HTTP method
            path: Path relative to API_BASE_URL, e.g. "/analytics/aov"
            credential: Attached as "Authorization: Bearer <token>" when given
            tenant_id: Attached as the X-Tenant-ID header when given
            params: Query parameters
            json: JSON request body
            failure_message: See classify_response
            escalate_unauthorized: See classify_response

        Raises:
            UnreachableException: If no response was obtained (incl. timeout)
            UnauthorizedException, UpstreamException, MalformedResponseException:
                See classify_response
        """
        headers = {"Accept": "application/json"}
        if credential is not None:
            headers["Authorization"] = f"Bearer {credential.token}"
        if tenant_id is not None:
            headers[TENANT_HEADER] = str(tenant_id)

        try:
            response = await self.http.request(
                method, path, headers=headers, params=params, json=json
            )
        except httpx.RequestError as e:
            logger.warning("Upstream %s %s unreachable: %s", method, path, type(e).__name__)
            raise UnreachableException(UNREACHABLE_MESSAGE) from e

        return classify_response(
            response,
            failure_message=failure_message,
            escalate_unauthorized=escalate_unauthorized,
        )

    async def get(self, path: str, **kwargs: Any) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> Any:
        return await self.request("POST", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", path, **kwargs)
