"""Unit tests for the admin API routes."""
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from src.stickyadd_core.api.dependencies import get_admin_service
from src.stickyadd_core.bar.config import UnknownPresetError, merge_with_defaults
from src.stickyadd_core.bar.preview import build_preview
from src.stickyadd_core.main import create_app
from src.stickyadd_core.shopify.exceptions import (
    ConfigLockedError,
    ShopifyAdminGraphQLError,
)
from src.stickyadd_core.stats.daily import DailyStatStore, stat_day


HEADERS = {"X-STICKYADD-API-KEY": "test-api-key"}
SHOP = "test-shop.myshopify.com"


@pytest.fixture
def mock_service():
    service = MagicMock()
    service.load_dashboard = AsyncMock(return_value={"shop": SHOP, "currentStep": 1})
    service.save_step = AsyncMock(return_value={"status": "success"})
    service.load_config = AsyncMock(return_value=merge_with_defaults(None))
    service.load_preview = AsyncMock(return_value=build_preview(merge_with_defaults(None)))
    service.save_config = AsyncMock(return_value={"status": "success"})
    service.set_enabled = AsyncMock(return_value=merge_with_defaults({"enabled": False}))
    service.apply_preset = AsyncMock(return_value=merge_with_defaults(None))
    return service


@pytest.fixture
def stats_db(tmp_path):
    return tmp_path / "stats.db"


@pytest.fixture
def client(monkeypatch, mock_service, stats_db):
    """Test client with mocked environment and admin service."""
    monkeypatch.setenv("STICKYADD_API_KEY", "test-api-key")
    monkeypatch.setenv("SHOPIFY_STORE_DOMAIN", SHOP)
    monkeypatch.setenv("SHOPIFY_ADMIN_ACCESS_TOKEN", "shpat_test")
    monkeypatch.setenv("SHOPIFY_API_VERSION", "2024-10")
    monkeypatch.setenv("STATS_DB_PATH", str(stats_db))
    app = create_app()
    app.dependency_overrides[get_admin_service] = lambda: mock_service
    with TestClient(app) as client:
        yield client


def test_health_requires_no_key(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.parametrize(
    "method,path",
    [
        ("get", "/api/v1/dashboard"),
        ("get", "/api/v1/config"),
        ("get", "/api/v1/presets"),
        ("get", "/api/v1/stats"),
    ],
)
def test_missing_api_key(client, method, path):
    response = getattr(client, method)(path)

    assert response.status_code == 401
    assert "Invalid API key" in response.json()["detail"]


def test_invalid_api_key(client):
    response = client.get("/api/v1/dashboard", headers={"X-STICKYADD-API-KEY": "wrong-key"})

    assert response.status_code == 401


def test_dashboard(client, mock_service):
    response = client.get("/api/v1/dashboard", headers=HEADERS)

    assert response.status_code == 200
    assert response.json() == {"shop": SHOP, "currentStep": 1}


def test_dashboard_shopify_error_is_bad_gateway(client, mock_service):
    mock_service.load_dashboard.side_effect = ShopifyAdminGraphQLError("GraphQL root errors: denied")

    response = client.get("/api/v1/dashboard", headers=HEADERS)

    assert response.status_code == 502
    assert "denied" in response.json()["detail"]


def test_save_onboarding_step(client, mock_service):
    response = client.post(
        "/api/v1/onboarding/steps",
        json={
            "shopId": "gid://shopify/Shop/1",
            "step": 2,
            "configUpdate": {"display": {"glassy": True}},
        },
        headers=HEADERS,
    )

    assert response.status_code == 200
    assert response.json() == {"status": "success"}
    mock_service.save_step.assert_awaited_once_with(
        shop_id="gid://shopify/Shop/1",
        step=2,
        setup_complete=False,
        reset=False,
        config_update={"display": {"glassy": True}},
    )


def test_save_onboarding_step_validates_step(client, mock_service):
    response = client.post(
        "/api/v1/onboarding/steps",
        json={"shopId": "gid://shopify/Shop/1", "step": 0},
        headers=HEADERS,
    )

    assert response.status_code == 422
    mock_service.save_step.assert_not_awaited()


def test_save_onboarding_step_locked(client, mock_service):
    mock_service.save_step.side_effect = ConfigLockedError(SHOP, f"stickyadd:config_lock:{SHOP}")

    response = client.post(
        "/api/v1/onboarding/steps",
        json={"shopId": "gid://shopify/Shop/1", "step": 2, "configUpdate": {}},
        headers=HEADERS,
    )

    assert response.status_code == 409


def test_save_onboarding_step_user_errors(client, mock_service):
    mock_service.save_step.side_effect = ShopifyAdminGraphQLError(
        [{"field": ["metafields"], "message": "invalid"}]
    )

    response = client.post(
        "/api/v1/onboarding/steps",
        json={"shopId": "gid://shopify/Shop/1", "step": 2},
        headers=HEADERS,
    )

    assert response.status_code == 502


def test_get_config(client):
    response = client.get("/api/v1/config", headers=HEADERS)

    assert response.status_code == 200
    assert response.json()["button"]["text"] == "Add to cart"


def test_put_config(client, mock_service):
    config = {"enabled": True, "button": {"text": "Buy"}}

    response = client.put("/api/v1/config", json={"config": config}, headers=HEADERS)

    assert response.status_code == 200
    mock_service.save_config.assert_awaited_once_with(config)


def test_config_preview(client):
    response = client.get("/api/v1/config/preview", headers=HEADERS)

    assert response.status_code == 200
    data = response.json()
    assert data["css_variables"]["--sb-bg"] == "#202223"
    assert data["product_title"] == "Classic T-Shirt"


def test_set_enabled(client, mock_service):
    response = client.post("/api/v1/config/enabled", json={"enabled": False}, headers=HEADERS)

    assert response.status_code == 200
    assert response.json()["enabled"] is False
    mock_service.set_enabled.assert_awaited_once_with(False)


def test_list_presets(client):
    response = client.get("/api/v1/presets", headers=HEADERS)

    assert response.status_code == 200
    assert [preset["id"] for preset in response.json()] == ["clean", "bold", "glassy", "minimal"]


def test_apply_preset(client, mock_service):
    response = client.post("/api/v1/presets/bold/apply", headers=HEADERS)

    assert response.status_code == 200
    mock_service.apply_preset.assert_awaited_once_with("bold")


def test_apply_unknown_preset(client, mock_service):
    mock_service.apply_preset.side_effect = UnknownPresetError("neon")

    response = client.post("/api/v1/presets/neon/apply", headers=HEADERS)

    assert response.status_code == 404


def test_stats(client, stats_db):
    store = DailyStatStore(stats_db)
    today = stat_day()
    store.record_event(SHOP, "impression", today)
    store.record_event(SHOP, "click", today)
    store.record_event("other.myshopify.com", "click", today)

    response = client.get("/api/v1/stats?days=7", headers=HEADERS)

    assert response.status_code == 200
    data = response.json()
    assert data["summary"]["impressions"] == 1
    assert data["summary"]["clicks"] == 1
    assert data["summary"]["ctr"] == 1.0
    assert data["summary"]["window_end"] == today.isoformat()
    assert [row["stat_date"] for row in data["daily"]] == [today.isoformat()]


@pytest.mark.parametrize("days", [0, 366, "abc"])
def test_stats_rejects_bad_window(client, days):
    response = client.get(f"/api/v1/stats?days={days}", headers=HEADERS)

    assert response.status_code == 422


def test_missing_shopify_credentials(monkeypatch):
    monkeypatch.setenv("STICKYADD_API_KEY", "test-api-key")
    monkeypatch.delenv("SHOPIFY_STORE_DOMAIN", raising=False)
    monkeypatch.delenv("SHOPIFY_ADMIN_ACCESS_TOKEN", raising=False)

    with TestClient(create_app()) as client:
        response = client.get("/api/v1/dashboard", headers=HEADERS)

    assert response.status_code == 500
    assert "SHOPIFY_STORE_DOMAIN" in response.json()["detail"]
