"""Shopify integration modules."""
from .admin_client import ShopifyAdminClient
from .exceptions import (
    ConfigLockedError,
    ShopifyAdminApiError,
    ShopifyAdminClientError,
    ShopifyAdminGraphQLError,
)

__all__ = [
    "ShopifyAdminClient",
    "ShopifyAdminClientError",
    "ShopifyAdminApiError",
    "ShopifyAdminGraphQLError",
    "ConfigLockedError",
]
