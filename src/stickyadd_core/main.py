"""StickyAdd FastAPI application entry point."""
import logging

from fastapi import FastAPI

from .api.analytics import router as analytics_router
from .api.routes import router as api_router
from .api.webhooks import router as webhooks_router


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title="StickyAdd API",
        version="0.1.0",
        description="Admin backend for the StickyAdd sticky add-to-cart bar",
    )

    app.include_router(api_router)
    app.include_router(analytics_router)
    app.include_router(webhooks_router)

    @app.get("/health", tags=["health"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
