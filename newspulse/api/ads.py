"""
Ad endpoints: slot settings, the ad creative for a slot and click tracking.
"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from newspulse.api.dependencies import get_ad_service, get_ad_settings_service
from newspulse.application.ads import AdService, AdSettingsService

router = APIRouter(prefix="/public", tags=["ads"])

AD_CACHE = "public, max-age=30"


@router.get("/ad-settings", summary="Ad slot settings")
async def ad_settings(service: AdSettingsService = Depends(get_ad_settings_service)) -> JSONResponse:
    settings = await service.get_settings()
    return JSONResponse(
        content=settings.model_dump(by_alias=True),
        headers={"Cache-Control": "no-store"},
    )


@router.get("/ads/slot/{slot}", summary="Ad for a slot")
async def slot_ad(slot: str, service: AdService = Depends(get_ad_service)) -> JSONResponse:
    result = await service.get_slot_ad(slot)
    return JSONResponse(content=result.model_dump(), headers={"Cache-Control": AD_CACHE})


@router.api_route("/ads/{ad_id}/click", methods=["GET", "POST"], summary="Track an ad click")
async def ad_click(
    ad_id: str,
    request: Request,
    service: AdService = Depends(get_ad_service),
) -> JSONResponse:
    body = await service.track_click(ad_id, request.method)
    return JSONResponse(content=body, headers={"Cache-Control": "no-store"})
