"""FastAPI routes for the StickyAdd embedded admin (dashboard, wizard, customizer)."""
import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field

from ..bar.config import PRESETS, UnknownPresetError
from ..bar.preview import BarPreview
from ..bar.service import StickyBarAdminService
from ..shopify.exceptions import ConfigLockedError, ShopifyAdminClientError
from ..stats.daily import DailyStat, DailyStatStore, StatsSummary
from .auth import require_api_key
from .dependencies import configured_shop, get_admin_service, get_stats_store


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1",
    tags=["admin"],
    dependencies=[Depends(require_api_key)],
)


class OnboardingStepRequest(BaseModel):
    """Wizard step submission."""

    model_config = ConfigDict(populate_by_name=True)

    shop_id: str = Field(..., alias="shopId", description="Shop GID (metafield owner)")
    step: int = Field(..., ge=1, description="Step the merchant just completed")
    setup_complete: bool = Field(False, alias="setupComplete")
    reset: bool = Field(False, description="Restart the wizard from step 1")
    config_update: Optional[dict[str, Any]] = Field(
        None,
        alias="configUpdate",
        description="Partial config deep-merged into the stored config",
    )


class ConfigSaveRequest(BaseModel):
    """Customizer save: the whole config object."""

    config: dict[str, Any]


class EnabledRequest(BaseModel):
    enabled: bool


class StatusResponse(BaseModel):
    status: str


class StatsResponse(BaseModel):
    summary: StatsSummary
    daily: list[DailyStat]


def _shopify_error(exc: ShopifyAdminClientError) -> HTTPException:
    logger.error("Shopify Admin API call failed: %s", exc, exc_info=True)
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=f"Shopify Admin API error: {exc}",
    )


def _locked_error(exc: ConfigLockedError) -> HTTPException:
    logger.warning("%s", exc)
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail="Config is being updated by another request, retry shortly",
    )


@router.get("/dashboard", summary="Dashboard and wizard state")
async def get_dashboard(
    service: StickyBarAdminService = Depends(get_admin_service),
) -> dict[str, Any]:
    try:
        return await service.load_dashboard()
    except ShopifyAdminClientError as exc:
        raise _shopify_error(exc) from exc


@router.post(
    "/onboarding/steps",
    response_model=StatusResponse,
    summary="Save onboarding wizard step",
)
async def save_onboarding_step(
    payload: OnboardingStepRequest,
    service: StickyBarAdminService = Depends(get_admin_service),
) -> StatusResponse:
    """Advance (or reset) the wizard, optionally merging a config update.

    Returns 409 when another request holds the config lock and 502 when
    Shopify rejects the write.
    """
    try:
        result = await service.save_step(
            shop_id=payload.shop_id,
            step=payload.step,
            setup_complete=payload.setup_complete,
            reset=payload.reset,
            config_update=payload.config_update,
        )
    except ConfigLockedError as exc:
        raise _locked_error(exc) from exc
    except ShopifyAdminClientError as exc:
        raise _shopify_error(exc) from exc

    return StatusResponse(**result)


@router.get("/config", summary="Stored config merged with defaults")
async def get_config(
    service: StickyBarAdminService = Depends(get_admin_service),
) -> dict[str, Any]:
    try:
        return await service.load_config()
    except ShopifyAdminClientError as exc:
        raise _shopify_error(exc) from exc


@router.put("/config", response_model=StatusResponse, summary="Save customizer config")
async def put_config(
    payload: ConfigSaveRequest,
    service: StickyBarAdminService = Depends(get_admin_service),
) -> StatusResponse:
    try:
        result = await service.save_config(payload.config)
    except ConfigLockedError as exc:
        raise _locked_error(exc) from exc
    except ShopifyAdminClientError as exc:
        raise _shopify_error(exc) from exc

    return StatusResponse(**result)


@router.get("/config/preview", response_model=BarPreview, summary="Customizer preview")
async def get_config_preview(
    service: StickyBarAdminService = Depends(get_admin_service),
) -> BarPreview:
    try:
        return await service.load_preview()
    except ShopifyAdminClientError as exc:
        raise _shopify_error(exc) from exc


@router.post("/config/enabled", summary="Enable or disable the sticky bar")
async def set_enabled(
    payload: EnabledRequest,
    service: StickyBarAdminService = Depends(get_admin_service),
) -> dict[str, Any]:
    try:
        return await service.set_enabled(payload.enabled)
    except ConfigLockedError as exc:
        raise _locked_error(exc) from exc
    except ShopifyAdminClientError as exc:
        raise _shopify_error(exc) from exc


@router.get("/presets", summary="Available style presets")
async def list_presets() -> list[dict[str, Any]]:
    return PRESETS


@router.post("/presets/{preset_id}/apply", summary="Apply a style preset")
async def apply_preset(
    preset_id: str,
    service: StickyBarAdminService = Depends(get_admin_service),
) -> dict[str, Any]:
    try:
        return await service.apply_preset(preset_id)
    except UnknownPresetError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown preset: {preset_id}",
        ) from exc
    except ConfigLockedError as exc:
        raise _locked_error(exc) from exc
    except ShopifyAdminClientError as exc:
        raise _shopify_error(exc) from exc


@router.get("/stats", response_model=StatsResponse, summary="Sticky bar performance")
def get_stats(
    days: int = Query(30, ge=1, le=365, description="Window size in days"),
    store: DailyStatStore = Depends(get_stats_store),
    shop_domain: str = Depends(configured_shop),
) -> StatsResponse:
    summary = store.get_summary(shop_domain, days=days)
    daily = store.get_daily(shop_domain, summary.window_start, summary.window_end)

    return StatsResponse(summary=summary, daily=daily)
