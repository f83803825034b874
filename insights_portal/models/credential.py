"""Bearer credential held by the browser for one session."""

from dataclasses import dataclass
from datetime import datetime, timedelta, UTC


@dataclass(frozen=True)
class Credential:
    """
    Opaque bearer token plus the name shown in the header bar.

    Created on successful login or registration and passed explicitly to
    every component that calls the upstream API. Expiry is informational;
    the upstream API remains authoritative and answers 401 once the token
    is no longer accepted.

    Attributes:
        token: Opaque access token issued by the upstream auth endpoint
        issued_at: When this front end minted the credential
        expires_at: End of the cookie lifetime
        display_name: Human-readable name ("First Last" or the email)
    """

    token: str
    issued_at: datetime
    expires_at: datetime
    display_name: str

    @classmethod
    def issue(cls, token: str, display_name: str, lifetime_seconds: int) -> "Credential":
        """Mint a credential valid from now for lifetime_seconds."""
        issued_at = datetime.now(UTC).replace(microsecond=0)
        return cls(
            token=token,
            issued_at=issued_at,
            expires_at=issued_at + timedelta(seconds=lifetime_seconds),
            display_name=display_name,
        )

    def __repr__(self) -> str:
        return f"<Credential(display_name='{self.display_name}', expires_at={self.expires_at.isoformat()})>"
