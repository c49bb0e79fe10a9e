"""StickyAdd HTTP layer: admin API, storefront analytics beacon and webhooks."""
from .analytics import router as analytics_router
from .auth import require_api_key
from .routes import router
from .webhooks import router as webhooks_router

__all__ = ["analytics_router", "require_api_key", "router", "webhooks_router"]
