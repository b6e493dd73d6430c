"""
Broadcast ticker endpoint.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from newspulse.api.dependencies import forward_headers, get_broadcast_service
from newspulse.application.broadcast import BroadcastService
from newspulse.i18n.locale import Locale

router = APIRouter(prefix="/public", tags=["broadcast"])

NO_STORE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


@router.get("/broadcast", summary="Breaking and live tickers")
async def public_broadcast(
    request: Request,
    lang: Optional[str] = Query(default=None),
    service: BroadcastService = Depends(get_broadcast_service),
) -> JSONResponse:
    """Unsupported `lang` values are not forwarded."""
    broadcast = await service.fetch(Locale.from_code(lang) if lang else None, forward_headers(request))
    return JSONResponse(
        content=broadcast.model_dump(by_alias=True, mode="json"),
        headers=NO_STORE_HEADERS,
    )
