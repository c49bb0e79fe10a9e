"""Shopify webhook receiver (orders/create → attributed order counters)."""
import asyncio
import base64
import hashlib
import hmac
import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os
from fastapi import APIRouter, Header, HTTPException, Request, status
from fastapi.responses import Response

from ..stats.attribution import attribute_order
from ..stats.daily import stat_day
from .dependencies import get_stats_store


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])

ORDERS_CREATE_TOPICS = {"orders/create", "ORDERS_CREATE"}


def verify_shopify_hmac(raw_body: bytes, received_hmac: Optional[str], secret: str) -> bool:
    """Check X-Shopify-Hmac-Sha256 (base64 HMAC-SHA256 of the raw body)."""
    if not received_hmac:
        return False
    digest = hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).digest()
    calculated = base64.b64encode(digest).decode()
    return hmac.compare_digest(
        received_hmac.strip().encode("utf-8"), calculated.encode("ascii")
    )


async def append_raw_webhook(envelope: dict, raw_dir: Path) -> Path:
    """Append one webhook envelope to the day's JSONL audit file.

    Args:
        envelope: Topic, shop, webhook id and parsed payload
        raw_dir: Directory holding ``webhooks_YYYYMMDD.jsonl`` files

    Returns:
        Path of the file written
    """
    await aiofiles.os.makedirs(raw_dir, exist_ok=True)
    path = raw_dir / f"webhooks_{datetime.now(timezone.utc):%Y%m%d}.jsonl"

    async with aiofiles.open(path, mode="a", encoding="utf-8") as f:
        await f.write(json.dumps(envelope, separators=(",", ":")) + "\n")

    return path


@router.post("/app/orders_create")
async def orders_create_webhook(
    request: Request,
    x_shopify_hmac_sha256: Optional[str] = Header(default=None),
    x_shopify_topic: Optional[str] = Header(default=None),
    x_shopify_shop_domain: Optional[str] = Header(default=None),
    x_shopify_webhook_id: Optional[str] = Header(default=None),
) -> Response:
    """Verify, audit and attribute an orders/create delivery.

    Verified deliveries always get an empty 200, including other topics, so
    Shopify does not retry them.
    """
    secret = os.getenv("SHOPIFY_API_SECRET")
    if not secret:
        raise RuntimeError("SHOPIFY_API_SECRET environment variable not configured")

    raw = await request.body()
    if not verify_shopify_hmac(raw, x_shopify_hmac_sha256, secret):
        logger.warning(
            "Rejected webhook with invalid HMAC: topic=%s, shop=%s",
            x_shopify_topic,
            x_shopify_shop_domain,
        )
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid HMAC")

    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid JSON payload: {exc}",
        ) from exc

    shop = x_shopify_shop_domain or os.getenv("SHOPIFY_STORE_DOMAIN", "")
    logger.info("Received %s webhook for %s", x_shopify_topic, shop)

    raw_dir = Path(os.getenv("WEBHOOK_RAW_DIR", "data/webhooks/raw"))
    await append_raw_webhook(
        {
            "received_at": datetime.now(timezone.utc).isoformat(),
            "topic": x_shopify_topic,
            "shop": shop,
            "webhook_id": x_shopify_webhook_id,
            "payload": payload,
        },
        raw_dir,
    )

    if x_shopify_topic not in ORDERS_CREATE_TOPICS or not isinstance(payload, dict):
        return Response(status_code=status.HTTP_200_OK)

    attribution = attribute_order(payload)
    if attribution.has_attribution:
        try:
            store = await asyncio.to_thread(get_stats_store)
            await asyncio.to_thread(
                store.record_attributed_order, shop, attribution.revenue, stat_day()
            )
        except Exception as exc:
            logger.error(
                "Failed to record attributed order %s for %s: %s",
                attribution.order_id,
                shop,
                exc,
                exc_info=True,
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to record attributed order",
            ) from exc

        logger.info(
            "Attributed order %s to stickyadd: $%.2f",
            attribution.order_id,
            attribution.revenue,
        )

    return Response(status_code=status.HTTP_200_OK)
