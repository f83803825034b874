"""Validated dashboard query parameters."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum as PyEnum

ALLOWED_LIMITS = (5, 10, 20, 50)
DEFAULT_LIMIT = 5
WINDOW_DAYS = 30


class ProductSortKey(str, PyEnum):
    """Ranking used for the top products list."""

    REVENUE = "revenue"
    QUANTITY = "quantity"


@dataclass(frozen=True)
class AnalyticsQuerySpec:
    """
    Everything the analytics fan-out needs to know about one dashboard request.

    Built only by services.query_validator.validate_query, which clamps every
    raw parameter to a safe value, so nothing downstream re-validates.

    Attributes:
        tenant_id: Tenant whose analytics are requested
        window_start: First instant of the 30-day window (inclusive)
        window_end: Last instant of the window ("now" at validation time)
        stock_limit: Row count for stockout products, one of ALLOWED_LIMITS
        product_limit: Row count for top products, one of ALLOWED_LIMITS
        product_sort_key: Ranking for top products
    """

    tenant_id: str
    window_start: datetime
    window_end: datetime
    stock_limit: int = DEFAULT_LIMIT
    product_limit: int = DEFAULT_LIMIT
    product_sort_key: ProductSortKey = ProductSortKey.REVENUE

    def __post_init__(self):
        if self.window_start > self.window_end:
            raise ValueError("window_start must not be after window_end")
        if self.stock_limit not in ALLOWED_LIMITS:
            raise ValueError(f"stock_limit must be one of {ALLOWED_LIMITS}")
        if self.product_limit not in ALLOWED_LIMITS:
            raise ValueError(f"product_limit must be one of {ALLOWED_LIMITS}")

    def as_query_params(self) -> dict[str, str]:
        """Raw query parameters that validate back to this spec."""
        return {
            "stockLimit": str(self.stock_limit),
            "prodLimit": str(self.product_limit),
            "prodBy": self.product_sort_key.value,
        }
