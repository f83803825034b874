"""Tenant access roles reported by the upstream API."""

from enum import Enum as PyEnum


class TenantRole(str, PyEnum):
    """
    Roles a user can hold on a connected store.

    The upstream API owns the role list; values not listed here are kept
    verbatim on TenantAccess.role and simply have no known_role.

    - OWNER: connected the store, may delete it
    - ADMIN: manages the store connection
    - STAFF: read access to analytics
    """

    OWNER = "owner"
    ADMIN = "admin"
    STAFF = "staff"

    @classmethod
    def parse(cls, value: str) -> "TenantRole | None":
        """Return the matching role, or None for roles this portal does not know."""
        try:
            return cls(value.lower())
        except ValueError:
            return None
