"""
Community reporter proxy endpoints.
"""
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from newspulse.api.dependencies import get_community_service
from newspulse.application.community_reporter import CommunityReporterService
from newspulse.infrastructure.backend_client import ProxyResult

router = APIRouter(prefix="/community-reporter", tags=["community-reporter"])


def _respond(result: ProxyResult) -> Response:
    if result.raw:
        return PlainTextResponse(status_code=result.status_code, content=result.body)
    return JSONResponse(status_code=result.status_code, content=result.body)


@router.post("/submit", summary="Submit a community story")
async def submit_story(
    payload: Any = Body(default=None),
    service: CommunityReporterService = Depends(get_community_service),
) -> Response:
    return _respond(await service.submit(payload))


@router.post("/{story_id}/withdraw", summary="Withdraw a submitted story")
async def withdraw_story(
    story_id: str,
    payload: Any = Body(default=None),
    service: CommunityReporterService = Depends(get_community_service),
) -> Response:
    if not story_id.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="id is required")
    return _respond(await service.withdraw(story_id, payload))


@router.get("/my-stories", summary="Stories submitted by a reporter")
async def my_stories(
    email: Optional[str] = Query(default=None),
    service: CommunityReporterService = Depends(get_community_service),
) -> Response:
    if not email or not email.strip():
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"ok": False, "message": "email is required"},
        )
    return _respond(await service.my_stories(email))


@router.get("/config", summary="Community reporter form config")
async def reporter_config(service: CommunityReporterService = Depends(get_community_service)) -> Response:
    return _respond(await service.config())
