from datetime import datetime, UTC

from jose import JWTError, jwt

from insights_portal.config import settings
from insights_portal.core.exceptions import UnauthorizedException
from insights_portal.models.credential import Credential

ALGORITHM = "HS256"


def seal_credential(credential: Credential) -> str:
    """
    Seal a credential into a signed, tamper-evident cookie value.

    The upstream bearer token travels as the 'tok' claim of an HS256 JWS
    signed with SECRET_KEY, so any edit to the cookie invalidates it.

    Args:
        credential: Credential minted after login or registration

    Returns:
        Compact JWS string suitable for a cookie value
    """
    claims = {
        "tok": credential.token,
        "name": credential.display_name,
        "iat": int(credential.issued_at.timestamp()),
        "exp": int(credential.expires_at.timestamp()),
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=ALGORITHM)


def open_credential(sealed: str) -> Credential:
    """
    Verify and unpack a sealed credential.

    Args:
        sealed: Cookie value produced by seal_credential

    Returns:
        The original Credential

    Raises:
        UnauthorizedException: If signature invalid, expired, or claims missing
    """
    try:
        payload = jwt.decode(sealed, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        raise UnauthorizedException(f"Invalid session: {str(e)}")

    token = payload.get("tok")
    if not isinstance(token, str) or not token:
        raise UnauthorizedException("Session missing access token")

    exp = payload.get("exp")
    if exp is None:
        raise UnauthorizedException("Session missing expiration")

    iat = payload.get("iat", exp)
    return Credential(
        token=token,
        issued_at=datetime.fromtimestamp(iat, UTC),
        expires_at=datetime.fromtimestamp(exp, UTC),
        display_name=str(payload.get("name") or ""),
    )
