from datetime import datetime

from pydantic import AliasGenerator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from insights_portal.models.role import TenantRole

# Upstream bodies are camelCase; our own responses stay snake_case.
UPSTREAM_MODEL_CONFIG = ConfigDict(
    alias_generator=AliasGenerator(validation_alias=to_camel),
    populate_by_name=True,
    coerce_numbers_to_str=True,
)


class TenantAccess(BaseModel):
    """The caller's access record for one tenant (GET /tenant-access/tenant/{id})"""

    access_id: int
    tenant_id: str
    shop_domain: str
    shop_name: str | None = None
    role: str
    is_active: bool
    created_at: datetime

    model_config = UPSTREAM_MODEL_CONFIG

    @property
    def known_role(self) -> TenantRole | None:
        return TenantRole.parse(self.role)

    @property
    def title(self) -> str:
        """Heading for the store: its name, else its domain"""
        return self.shop_name or self.shop_domain


class TenantStats(BaseModel):
    """Headline counters for a tenant; every counter is optional"""

    tenant_id: str
    total_revenue: float | None = None
    total_orders: int | None = None
    total_customers: int | None = None

    model_config = UPSTREAM_MODEL_CONFIG


class TenantListResponse(BaseModel):
    """Connected stores for the signed-in user"""

    tenants: list[TenantAccess] = Field(default_factory=list)
    error: str | None = None
    display_name: str | None = None
