"""
Site-wide public settings: public mode, the published home layout and the
community feature toggles.
"""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from newspulse.api.dependencies import (
    get_community_service,
    get_public_mode_service,
    get_site_settings_service,
)
from newspulse.application.community_reporter import CommunityReporterService
from newspulse.application.public_mode import PublicModeService
from newspulse.application.site_settings import PublicSiteSettingsService

router = APIRouter(prefix="/public", tags=["settings"])


@router.get("/mode", summary="Public site mode")
async def public_mode(service: PublicModeService = Depends(get_public_mode_service)) -> JSONResponse:
    mode = await service.get_mode()
    return JSONResponse(
        content=mode.model_dump(by_alias=True, exclude_none=True, mode="json"),
        headers={"Cache-Control": "public, max-age=60"},
    )


@router.get("/settings", summary="Published home layout and ticker preferences")
async def public_site_settings(
    service: PublicSiteSettingsService = Depends(get_site_settings_service),
) -> JSONResponse:
    """Always 200; unavailable or malformed backend settings yield the defaults."""
    published = await service.get_settings()
    return JSONResponse(
        content=published.model_dump(by_alias=True, mode="json"),
        headers={"Cache-Control": "public, max-age=60"},
    )


@router.get("/community/settings", summary="Community feature toggles")
async def community_settings(
    service: CommunityReporterService = Depends(get_community_service),
) -> JSONResponse:
    toggles = await service.settings()
    return JSONResponse(content=toggles.model_dump(by_alias=True), headers={"Cache-Control": "no-store"})
