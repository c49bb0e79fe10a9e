"""Admin loaders and actions for the dashboard, wizard and customizer.

Config writes that read the stored value first (wizard steps, the enabled
toggle, presets) hold a per-shop Redis lock for the read-merge-write so two
admin tabs cannot overwrite each other's changes.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from redis.asyncio import Redis
from redis.asyncio.lock import Lock as AsyncRedisLock

from ..schemas.shop import MetafieldInput
from ..shopify.admin_client import ShopifyAdminClient
from ..shopify.exceptions import ConfigLockedError
from ..shopify.graphql_strings import CONFIG_KEY, ONBOARDING_KEY
from .config import (
    apply_preset,
    deep_merge,
    get_preset,
    merge_with_defaults,
    parse_metafield_value,
    wizard_config,
)
from .onboarding import OnboardingState, next_state, progress_percent
from .preview import BarPreview, build_preview
from .theme import is_embed_active, theme_editor_url


logger = logging.getLogger(__name__)


class StickyBarAdminService:
    """Server side of the embedded admin pages."""

    LOCK_TTL_SECONDS = 30
    LOCK_WAIT_SECONDS = 5.0

    def __init__(
        self,
        client: ShopifyAdminClient,
        redis: Redis,
        lock_ttl_seconds: int = LOCK_TTL_SECONDS,
        lock_wait_seconds: float = LOCK_WAIT_SECONDS,
    ) -> None:
        """Initialize admin service.

        Args:
            client: Shopify Admin client bound to the shop
            redis: redis.asyncio client used for the config write lock
            lock_ttl_seconds: Lock expiry
            lock_wait_seconds: How long a writer waits for the lock
        """
        self.client = client
        self.redis = redis
        self.shop_domain = client.shop_domain
        self.lock_ttl_seconds = lock_ttl_seconds
        self.lock_wait_seconds = lock_wait_seconds
        self._lock_key = f"stickyadd:config_lock:{self.shop_domain}"

    async def load_dashboard(self) -> dict:
        """Everything the index page needs: wizard state, status, embed check."""
        shop_settings = await self.client.fetch_shop_settings()
        settings_data, first_product = await self.client.fetch_theme_and_product()

        stored_config = parse_metafield_value(shop_settings.config_value)
        onboarding = OnboardingState.from_metafield(shop_settings.onboarding_value)

        return {
            "shop": self.shop_domain,
            "shopId": shop_settings.shop_id,
            "setupComplete": onboarding.setup_complete,
            "currentStep": onboarding.current_step,
            "progressPercent": progress_percent(onboarding.current_step),
            "isAppEnabled": bool((stored_config or {}).get("enabled", False)),
            "isEmbedActive": is_embed_active(settings_data),
            "storedConfig": stored_config,
            "wizardConfig": wizard_config(stored_config),
            "firstProduct": first_product,
            "themeEditorUrl": theme_editor_url(self.shop_domain),
        }

    async def save_step(
        self,
        shop_id: str,
        step: int,
        setup_complete: bool = False,
        reset: bool = False,
        config_update: Optional[dict] = None,
    ) -> dict:
        """Persist wizard progress and, optionally, merge a config update.

        Args:
            shop_id: Shop GID (metafield owner)
            step: Step the merchant just completed
            setup_complete: True when finishing the last step
            reset: Restart the wizard from step 1
            config_update: Partial config deep-merged into the stored one
        """
        onboarding = next_state(step, setup_complete, reset)
        metafields = [
            MetafieldInput.json_value(ONBOARDING_KEY, onboarding.to_metafield(), shop_id)
        ]

        if config_update is None:
            await self.client.set_metafields(metafields)
        else:
            async with self._config_lock():
                existing = parse_metafield_value(await self.client.fetch_config_value())
                new_config = deep_merge(existing or {}, config_update)
                metafields.append(
                    MetafieldInput.json_value(CONFIG_KEY, new_config, shop_id)
                )
                await self.client.set_metafields(metafields)

        logger.info(
            "Saved onboarding step for shop=%s: step=%s -> %s, setup_complete=%s",
            self.shop_domain,
            step,
            onboarding.current_step,
            onboarding.setup_complete,
        )
        return {"status": "success"}

    async def load_config(self) -> dict:
        """Stored config merged with defaults (customizer loader)."""
        stored = parse_metafield_value(await self.client.fetch_config_value())
        return merge_with_defaults(stored)

    async def load_preview(self) -> BarPreview:
        """Preview of the merged config on the shop's first product."""
        config = await self.load_config()
        _, first_product = await self.client.fetch_theme_and_product()
        return build_preview(config, first_product, self.shop_domain)

    async def save_config(self, config: dict) -> dict:
        """Replace the stored config with ``config`` as sent by the customizer."""
        async with self._config_lock():
            shop_id = await self.client.fetch_shop_id()
            await self.client.set_metafields(
                [MetafieldInput.json_value(CONFIG_KEY, config, shop_id)]
            )
        return {"status": "success"}

    async def set_enabled(self, enabled: bool) -> dict:
        """Dashboard toggle for the storefront bar."""
        config = await self._update_config(lambda stored: deep_merge(stored, {"enabled": enabled}))
        logger.info("Sticky bar %s for shop=%s", "enabled" if enabled else "disabled", self.shop_domain)
        return config

    async def apply_preset(self, preset_id: str) -> dict:
        """Merge a style preset into the stored config."""
        get_preset(preset_id)
        config = await self._update_config(lambda stored: apply_preset(stored, preset_id))
        logger.info("Applied preset %s for shop=%s", preset_id, self.shop_domain)
        return config

    async def _update_config(self, update) -> dict:
        async with self._config_lock():
            shop_settings = await self.client.fetch_shop_settings()
            stored = parse_metafield_value(shop_settings.config_value) or {}
            new_config = update(stored)
            await self.client.set_metafields(
                [MetafieldInput.json_value(CONFIG_KEY, new_config, shop_settings.shop_id)]
            )
        return merge_with_defaults(new_config)

    @asynccontextmanager
    async def _config_lock(self) -> AsyncIterator[None]:
        lock = AsyncRedisLock(
            self.redis,
            name=self._lock_key,
            timeout=self.lock_ttl_seconds,
            blocking_timeout=self.lock_wait_seconds,
        )

        acquired = await lock.acquire()
        if not acquired:
            raise ConfigLockedError(self.shop_domain, self._lock_key)

        try:
            yield
        finally:
            try:
                await lock.release()
            except Exception as e:
                logger.error("Failed to release config lock: %s", e)
