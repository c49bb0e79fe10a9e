"""Pydantic models for Shopify Admin API payloads used by the admin surface."""
import json
from typing import Any, Optional

from pydantic import BaseModel, Field


class ShopSettings(BaseModel):
    """Shop id plus the raw values of the app metafields."""

    shop_id: str = Field(..., description="Shop GID (e.g., gid://shopify/Shop/123)")
    config_value: Optional[str] = Field(
        None, description="Raw JSON string of the stickyadd.config metafield"
    )
    onboarding_value: Optional[str] = Field(
        None, description="Raw JSON string of the stickyadd.onboarding metafield"
    )


class MetafieldInput(BaseModel):
    """Single entry of a metafieldsSet mutation."""

    namespace: str = "stickyadd"
    key: str
    type: str = "json"
    value: str = Field(..., description="Serialized JSON value")
    owner_id: str = Field(..., description="Owner GID (the shop)")

    @classmethod
    def json_value(cls, key: str, value: Any, owner_id: str) -> "MetafieldInput":
        """Build a json-typed metafield input from a Python value."""
        return cls(key=key, value=json.dumps(value), owner_id=owner_id)

    def to_graphql(self) -> dict:
        """Convert to MetafieldsSetInput (camelCase keys)."""
        return {
            "namespace": self.namespace,
            "key": self.key,
            "type": self.type,
            "value": self.value,
            "ownerId": self.owner_id,
        }


class OrderAttribution(BaseModel):
    """Revenue attributed to the sticky bar for one order."""

    order_id: Optional[str] = None
    has_attribution: bool = False
    revenue: float = 0.0
    line_count: int = Field(0, description="Number of attributed line items")
