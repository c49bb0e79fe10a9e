"""Unit tests for StickyBarAdminService (loaders, wizard steps, locked writes)."""
import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.stickyadd_core.bar.config import DEFAULT_CONFIG, UnknownPresetError
from src.stickyadd_core.bar.service import StickyBarAdminService
from src.stickyadd_core.schemas.shop import ShopSettings
from src.stickyadd_core.shopify.exceptions import ConfigLockedError


SHOP_ID = "gid://shopify/Shop/1"


@pytest.fixture
def mock_client():
    client = MagicMock()
    client.shop_domain = "test.myshopify.com"
    client.fetch_shop_settings = AsyncMock(
        return_value=ShopSettings(
            shop_id=SHOP_ID,
            config_value=json.dumps({"enabled": True, "button": {"text": "Buy"}}),
            onboarding_value=json.dumps({"currentStep": 3, "setupComplete": False}),
        )
    )
    client.fetch_theme_and_product = AsyncMock(return_value=(None, None))
    client.fetch_config_value = AsyncMock(
        return_value=json.dumps({"display": {"backgroundColor": "#000000", "glassy": False}})
    )
    client.fetch_shop_id = AsyncMock(return_value=SHOP_ID)
    client.set_metafields = AsyncMock(return_value=[])
    return client


@pytest.fixture
def mock_lock():
    lock = MagicMock()
    lock.acquire = AsyncMock(return_value=True)
    lock.release = AsyncMock()
    with patch("src.stickyadd_core.bar.service.AsyncRedisLock", return_value=lock) as lock_cls:
        lock_cls.instance = lock
        yield lock_cls


@pytest.fixture
def service(mock_client):
    return StickyBarAdminService(client=mock_client, redis=AsyncMock())


def _written(mock_client) -> dict:
    """Map of metafield key -> decoded value from the last set_metafields call."""
    (metafields,), _ = mock_client.set_metafields.call_args
    return {mf.key: json.loads(mf.value) for mf in metafields}


@pytest.mark.asyncio
async def test_load_dashboard(service, mock_client):
    settings_data = json.dumps(
        {"current": {"blocks": {"1": {"type": "shopify://apps/x/blocks/sticky_bar/y", "disabled": False}}}}
    )
    product = {"title": "Tee", "handle": "tee"}
    mock_client.fetch_theme_and_product.return_value = (settings_data, product)

    result = await service.load_dashboard()

    assert result["shop"] == "test.myshopify.com"
    assert result["shopId"] == SHOP_ID
    assert result["currentStep"] == 3
    assert result["setupComplete"] is False
    assert result["progressPercent"] == 50
    assert result["isAppEnabled"] is True
    assert result["isEmbedActive"] is True
    assert result["firstProduct"] == product
    assert result["storedConfig"]["button"]["text"] == "Buy"
    assert result["wizardConfig"]["button"] == {"text": "Buy"}
    assert result["themeEditorUrl"].startswith("https://test.myshopify.com/admin/themes")


@pytest.mark.asyncio
async def test_load_dashboard_fresh_install(service, mock_client):
    mock_client.fetch_shop_settings.return_value = ShopSettings(shop_id=SHOP_ID)

    result = await service.load_dashboard()

    assert result["currentStep"] == 1
    assert result["isAppEnabled"] is False
    assert result["isEmbedActive"] is False
    assert result["storedConfig"] is None


@pytest.mark.asyncio
async def test_save_step_without_config_update_skips_lock(service, mock_client, mock_lock):
    result = await service.save_step(SHOP_ID, step=1)

    assert result == {"status": "success"}
    assert _written(mock_client) == {"onboarding": {"currentStep": 2, "setupComplete": False}}
    mock_lock.assert_not_called()
    mock_client.fetch_config_value.assert_not_awaited()


@pytest.mark.asyncio
async def test_save_step_merges_config_update_under_lock(service, mock_client, mock_lock):
    await service.save_step(
        SHOP_ID,
        step=2,
        config_update={"display": {"glassy": True}, "button": {"text": "Go"}},
    )

    written = _written(mock_client)
    assert written["onboarding"] == {"currentStep": 3, "setupComplete": False}
    assert written["config"] == {
        "display": {"backgroundColor": "#000000", "glassy": True},
        "button": {"text": "Go"},
    }

    _, lock_kwargs = mock_lock.call_args
    assert lock_kwargs["name"] == "stickyadd:config_lock:test.myshopify.com"
    mock_lock.instance.acquire.assert_awaited_once()
    mock_lock.instance.release.assert_awaited_once()


@pytest.mark.asyncio
async def test_save_step_final_step(service, mock_client, mock_lock):
    await service.save_step(SHOP_ID, step=4, setup_complete=True)

    assert _written(mock_client)["onboarding"] == {"currentStep": 5, "setupComplete": True}


@pytest.mark.asyncio
async def test_save_step_reset(service, mock_client, mock_lock):
    await service.save_step(SHOP_ID, step=4, setup_complete=True, reset=True)

    assert _written(mock_client)["onboarding"] == {"currentStep": 1, "setupComplete": False}


@pytest.mark.asyncio
async def test_save_step_lock_unavailable(service, mock_client, mock_lock):
    mock_lock.instance.acquire.return_value = False

    with pytest.raises(ConfigLockedError):
        await service.save_step(SHOP_ID, step=2, config_update={"enabled": True})

    mock_client.set_metafields.assert_not_awaited()


@pytest.mark.asyncio
async def test_lock_released_when_write_fails(service, mock_client, mock_lock):
    mock_client.set_metafields.side_effect = RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await service.save_step(SHOP_ID, step=2, config_update={"enabled": True})

    mock_lock.instance.release.assert_awaited_once()


@pytest.mark.asyncio
async def test_load_config_merges_defaults(service):
    config = await service.load_config()

    assert config["display"]["backgroundColor"] == "#000000"
    assert config["display"]["rounded"] == DEFAULT_CONFIG["display"]["rounded"]
    assert config["button"] == DEFAULT_CONFIG["button"]


@pytest.mark.asyncio
async def test_load_preview(service, mock_client):
    mock_client.fetch_theme_and_product.return_value = (None, {"title": "Mug", "handle": "mug"})

    preview = await service.load_preview()

    assert preview.product_title == "Mug"
    assert preview.css_variables["--sb-bg"] == "#000000"
    assert preview.mock_url == "test.myshopify.com/products/mug"


@pytest.mark.asyncio
async def test_save_config_writes_verbatim(service, mock_client, mock_lock):
    config = {"enabled": False, "button": {"text": "Buy it"}}

    result = await service.save_config(config)

    assert result == {"status": "success"}
    assert _written(mock_client) == {"config": config}
    mock_client.fetch_shop_id.assert_awaited_once()


@pytest.mark.asyncio
async def test_set_enabled(service, mock_client, mock_lock):
    config = await service.set_enabled(False)

    assert _written(mock_client)["config"] == {"enabled": False, "button": {"text": "Buy"}}
    assert config["enabled"] is False
    assert config["button"]["text"] == "Buy"
    assert config["display"] == DEFAULT_CONFIG["display"]


@pytest.mark.asyncio
async def test_apply_preset(service, mock_client, mock_lock):
    config = await service.apply_preset("minimal")

    written = _written(mock_client)["config"]
    assert written["display"]["backgroundColor"] == "#f1f2f4"
    assert written["settings"]["position"] == "top"
    assert written["button"]["text"] == "Buy"
    assert config["product"]["showPrice"] is False


@pytest.mark.asyncio
async def test_apply_unknown_preset_does_not_touch_shopify(service, mock_client, mock_lock):
    with pytest.raises(UnknownPresetError):
        await service.apply_preset("neon")

    mock_lock.assert_not_called()
    mock_client.set_metafields.assert_not_awaited()
