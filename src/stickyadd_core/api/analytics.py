"""Public storefront beacon: impression/click counters for the sticky bar.

Called cross-origin from the storefront script, so every response carries
CORS headers and the endpoint sits outside the API-key protected router.
"""
import asyncio
import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse, Response

from ..stats.daily import InvalidEventError, parse_event_type
from .dependencies import get_stats_store


logger = logging.getLogger(__name__)

router = APIRouter(tags=["analytics"])

ANALYTICS_PATH = "/api/analytics"

ALLOW_ORIGIN = {"Access-Control-Allow-Origin": "*"}
SUCCESS_HEADERS = {
    **ALLOW_ORIGIN,
    "Access-Control-Allow-Methods": "POST",
    "Access-Control-Allow-Headers": "Content-Type",
}
PREFLIGHT_HEADERS = {
    **ALLOW_ORIGIN,
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"message": message},
        headers=ALLOW_ORIGIN,
    )


@router.post(ANALYTICS_PATH)
async def record_analytics_event(request: Request) -> JSONResponse:
    """Record one storefront event.

    Body: ``{"shop": "<domain>", "type": "impression" | "click"}``
    """
    try:
        body = await request.json()
        if isinstance(body, (list, str, int, float)):
            return _message(status.HTTP_400_BAD_REQUEST, "Missing required fields")

        shop = body.get("shop")
        event_type = body.get("type")

        if not shop or not event_type:
            return _message(status.HTTP_400_BAD_REQUEST, "Missing required fields")

        try:
            event = parse_event_type(event_type)
        except InvalidEventError:
            return _message(status.HTTP_400_BAD_REQUEST, "Invalid type")

        store = await asyncio.to_thread(get_stats_store)
        await asyncio.to_thread(store.record_event, shop, event)

    except Exception as exc:
        logger.error("Analytics error: %s", exc, exc_info=True)
        return _message(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    return JSONResponse(content={"status": "success"}, headers=SUCCESS_HEADERS)


@router.options(ANALYTICS_PATH)
async def analytics_preflight() -> Response:
    return Response(status_code=status.HTTP_200_OK, headers=PREFLIGHT_HEADERS)


@router.get(ANALYTICS_PATH)
async def analytics_info() -> JSONResponse:
    return JSONResponse(content={"message": "Analytics API"}, headers=ALLOW_ORIGIN)


@router.api_route(ANALYTICS_PATH, methods=["PUT", "PATCH", "DELETE"])
async def analytics_method_not_allowed() -> JSONResponse:
    return _message(status.HTTP_405_METHOD_NOT_ALLOWED, "Method not allowed")
