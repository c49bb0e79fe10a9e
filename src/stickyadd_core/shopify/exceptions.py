"""Custom exceptions for the Shopify Admin client."""


class ShopifyAdminClientError(Exception):
    """Base exception for all Shopify Admin client errors."""


class ShopifyAdminApiError(ShopifyAdminClientError):
    """Raised for Shopify API errors (HTTP 4xx/5xx, missing data)."""


class ShopifyAdminGraphQLError(ShopifyAdminClientError):
    """Raised when GraphQL returns userErrors or root-level errors."""

    def __init__(self, user_errors: object):
        self.user_errors = user_errors
        if isinstance(user_errors, str):
            message = user_errors
        else:
            message = f"GraphQL userErrors: {user_errors}"
        super().__init__(message)


class ConfigLockedError(ShopifyAdminClientError):
    """Raised when the per-shop config write lock cannot be acquired."""

    def __init__(self, shop_domain: str, lock_key: str):
        self.shop_domain = shop_domain
        self.lock_key = lock_key
        super().__init__(
            f"Config write lock already held for shop={shop_domain}, key={lock_key}"
        )
