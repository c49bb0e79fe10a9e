"""Async Shopify GraphQL Admin API client for the sticky bar admin surface."""
import asyncio
import logging
import random
from typing import Optional

import aiohttp

from ..schemas.shop import MetafieldInput, ShopSettings
from .exceptions import ShopifyAdminApiError, ShopifyAdminGraphQLError
from .graphql_strings import (
    MUTATION_METAFIELDS_SET,
    QUERY_CONFIG_METAFIELD,
    QUERY_SHOP_ID,
    QUERY_SHOP_SETTINGS,
    QUERY_THEME_AND_FIRST_PRODUCT,
)


def _redact(text: str, token: str) -> str:
    if not text or not token:
        return text
    return text.replace(token, "[REDACTED]")


class ShopifyAdminClient:
    """Async client for the Shopify GraphQL Admin API.

    Reads and writes the app metafields on the shop record and fetches the
    theme/product data the onboarding wizard needs. Retries 429/5xx/network
    errors with exponential backoff.
    """

    MAX_RETRY_ATTEMPTS = 4
    RETRY_BASE_DELAY = 0.5  # seconds
    RETRY_MULTIPLIER = 2.0
    RETRY_MAX_DELAY = 10.0  # seconds
    RETRY_JITTER_MS = 250  # milliseconds

    def __init__(
        self,
        shop_domain: str,
        access_token: str,
        api_version: str,
        session: aiohttp.ClientSession,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize Shopify Admin client.

        Args:
            shop_domain: e.g., "mystore.myshopify.com"
            access_token: Offline access token (never logged)
            api_version: e.g., "2024-10"
            session: Injected aiohttp ClientSession
            logger: Optional logger instance
        """
        self.shop_domain = shop_domain
        self._access_token = access_token
        self.api_version = api_version
        self.session = session
        self.logger = logger or logging.getLogger(__name__)

        self.graphql_endpoint = (
            f"https://{shop_domain}/admin/api/{api_version}/graphql.json"
        )

    async def fetch_shop_settings(self) -> ShopSettings:
        """Fetch shop id and both app metafields in one query."""
        resp_data = await self._post_graphql({"query": QUERY_SHOP_SETTINGS})
        shop = self._require_shop(resp_data)

        return ShopSettings(
            shop_id=shop["id"],
            config_value=(shop.get("config") or {}).get("value"),
            onboarding_value=(shop.get("onboarding") or {}).get("value"),
        )

    async def fetch_theme_and_product(self) -> tuple[Optional[str], Optional[dict]]:
        """Fetch main theme settings_data.json content and the first product.

        Failures are logged and swallowed: the dashboard still renders
        without embed detection or a preview product.

        Returns:
            (settings_data content or None, product node or None)
        """
        try:
            resp_data = await self._post_graphql(
                {"query": QUERY_THEME_AND_FIRST_PRODUCT}
            )
        except (ShopifyAdminApiError, ShopifyAdminGraphQLError) as exc:
            self.logger.warning("Could not fetch theme/product settings: %s", exc)
            return None, None

        data = resp_data.get("data") or {}

        theme_edges = (data.get("themes") or {}).get("edges") or []
        theme = theme_edges[0].get("node") if theme_edges else None

        settings_content = None
        if theme:
            file_edges = (theme.get("files") or {}).get("edges") or []
            if file_edges:
                body = (file_edges[0].get("node") or {}).get("body") or {}
                settings_content = body.get("content")

        product_edges = (data.get("products") or {}).get("edges") or []
        first_product = product_edges[0].get("node") if product_edges else None

        return settings_content, first_product

    async def fetch_config_value(self) -> Optional[str]:
        """Fetch the raw stickyadd.config metafield value."""
        resp_data = await self._post_graphql({"query": QUERY_CONFIG_METAFIELD})
        shop = self._require_shop(resp_data)
        return (shop.get("metafield") or {}).get("value")

    async def fetch_shop_id(self) -> str:
        """Fetch the shop GID (metafield owner id)."""
        resp_data = await self._post_graphql({"query": QUERY_SHOP_ID})
        return self._require_shop(resp_data)["id"]

    async def set_metafields(self, metafields: list[MetafieldInput]) -> list[dict]:
        """Write metafields via metafieldsSet.

        Args:
            metafields: Metafield inputs (all owned by the shop)

        Returns:
            Metafield records returned by Shopify

        Raises:
            ShopifyAdminGraphQLError: If the mutation returns userErrors
        """
        payload = {
            "query": MUTATION_METAFIELDS_SET,
            "variables": {"metafields": [mf.to_graphql() for mf in metafields]},
        }

        resp_data = await self._post_graphql(payload)
        result = (resp_data.get("data") or {}).get("metafieldsSet")
        if result is None:
            raise ShopifyAdminApiError("metafieldsSet missing from response data")

        user_errors = result.get("userErrors") or []
        if user_errors:
            raise ShopifyAdminGraphQLError(user_errors)

        self.logger.info(
            "Saved metafields for shop=%s: %s",
            self.shop_domain,
            ", ".join(f"{mf.namespace}.{mf.key}" for mf in metafields),
        )
        return result.get("metafields") or []

    def _require_shop(self, resp_data: dict) -> dict:
        shop = (resp_data.get("data") or {}).get("shop")
        if not shop:
            raise ShopifyAdminApiError(
                f"shop missing from response data for shop={self.shop_domain}"
            )
        return shop

    async def _post_graphql(self, payload: dict, retry: bool = True) -> dict:
        """Execute GraphQL POST with retry logic.

        Args:
            payload: GraphQL query/mutation payload
            retry: Whether to retry on transient errors

        Returns:
            Parsed JSON response data

        Raises:
            ShopifyAdminApiError: On non-retryable errors or max retries exceeded
            ShopifyAdminGraphQLError: On root-level GraphQL errors
        """
        headers = {
            "Content-Type": "application/json",
            "X-Shopify-Access-Token": self._access_token,
        }

        attempt = 0
        while True:
            attempt += 1

            try:
                timeout = aiohttp.ClientTimeout(total=30, connect=10)
                async with self.session.post(
                    self.graphql_endpoint,
                    json=payload,
                    headers=headers,
                    timeout=timeout,
                ) as resp:
                    response_text = await resp.text()
                    response_text = _redact(response_text, self._access_token)

                    if resp.status == 429:
                        if not retry or attempt > self.MAX_RETRY_ATTEMPTS:
                            raise ShopifyAdminApiError(
                                f"HTTP 429 after {attempt} attempts: {response_text[:200]}"
                            )

                        retry_after = resp.headers.get("Retry-After")
                        if retry_after:
                            delay = float(retry_after)
                        else:
                            delay = self._calculate_backoff(attempt)
                        self.logger.warning(
                            "HTTP 429, delay=%.2fs, attempt=%s", delay, attempt
                        )
                        await asyncio.sleep(delay)
                        continue

                    if 500 <= resp.status < 600:
                        if not retry or attempt > self.MAX_RETRY_ATTEMPTS:
                            raise ShopifyAdminApiError(
                                f"HTTP {resp.status} after {attempt} attempts: {response_text[:200]}"
                            )

                        delay = self._calculate_backoff(attempt)
                        self.logger.warning(
                            "HTTP %s, backoff=%.2fs, attempt=%s",
                            resp.status,
                            delay,
                            attempt,
                        )
                        await asyncio.sleep(delay)
                        continue

                    if 400 <= resp.status < 500:
                        raise ShopifyAdminApiError(
                            f"HTTP {resp.status} (non-retryable): {response_text[:500]}"
                        )

                    resp.raise_for_status()
                    json_data = await resp.json()

                    # Root-level errors come without usable data
                    if "errors" in json_data and json_data["errors"]:
                        error_messages = [
                            e.get("message", str(e)) for e in json_data["errors"]
                        ]
                        raise ShopifyAdminGraphQLError(
                            f"GraphQL root errors: {'; '.join(error_messages)}"
                        )

                    return json_data

            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                if not retry or attempt > self.MAX_RETRY_ATTEMPTS:
                    raise ShopifyAdminApiError(
                        f"Network error after {attempt} attempts: {e}"
                    ) from e

                delay = self._calculate_backoff(attempt)
                self.logger.warning(
                    "Network error: %s, backoff=%.2fs, attempt=%s", e, delay, attempt
                )
                await asyncio.sleep(delay)
                continue

    def _calculate_backoff(self, attempt: int) -> float:
        """Calculate exponential backoff with jitter.

        Args:
            attempt: Current retry attempt number (1-indexed)

        Returns:
            Delay in seconds
        """
        delay = min(
            self.RETRY_BASE_DELAY * (self.RETRY_MULTIPLIER ** (attempt - 1)),
            self.RETRY_MAX_DELAY,
        )
        jitter = random.uniform(0, self.RETRY_JITTER_MS / 1000.0)
        return delay + jitter
