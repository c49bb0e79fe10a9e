"""Per-request dependencies: admin service and stats store built from env."""
import os
from functools import lru_cache
from typing import AsyncIterator

import aiohttp
from fastapi import HTTPException, status
from redis.asyncio import Redis

from ..bar.service import StickyBarAdminService
from ..shopify.admin_client import ShopifyAdminClient
from ..stats.daily import DailyStatStore


def configured_shop() -> str:
    shop_domain = os.getenv("SHOPIFY_STORE_DOMAIN")
    if not shop_domain:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="SHOPIFY_STORE_DOMAIN is not configured",
        )
    return shop_domain


async def get_admin_service() -> AsyncIterator[StickyBarAdminService]:
    """Admin service bound to the configured shop.

    Opens an aiohttp session and a Redis connection for the request and
    closes both afterwards.
    """
    shop_domain = os.getenv("SHOPIFY_STORE_DOMAIN")
    access_token = os.getenv("SHOPIFY_ADMIN_ACCESS_TOKEN")
    api_version = os.getenv("SHOPIFY_API_VERSION", "2024-10")
    redis_url = os.getenv("REDIS_URL", "redis://localhost:6379")

    if not shop_domain or not access_token:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="SHOPIFY_STORE_DOMAIN and SHOPIFY_ADMIN_ACCESS_TOKEN must be set",
        )

    timeout = aiohttp.ClientTimeout(total=60, connect=10)

    async with aiohttp.ClientSession(timeout=timeout) as session:
        redis = Redis.from_url(redis_url, decode_responses=False)
        try:
            client = ShopifyAdminClient(
                shop_domain=shop_domain,
                access_token=access_token,
                api_version=api_version,
                session=session,
            )
            yield StickyBarAdminService(client=client, redis=redis)
        finally:
            await redis.aclose()


@lru_cache(maxsize=None)
def _stats_store(db_path: str) -> DailyStatStore:
    return DailyStatStore(db_path)


def get_stats_store() -> DailyStatStore:
    """Shared store for STATS_DB_PATH; the schema is set up on first use."""
    return _stats_store(os.getenv("STATS_DB_PATH", "data/stats.db"))
