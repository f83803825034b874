"""Outcomes of the per-request session guard."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Continue:
    """Let the request through to its route."""


@dataclass(frozen=True)
class RedirectToLogin:
    """Send the visitor to the login page, remembering where they were going."""

    return_path: str


@dataclass(frozen=True)
class RedirectToHome:
    """Signed-in visitors have no business on the login/register pages."""


SessionDecision = Continue | RedirectToLogin | RedirectToHome
