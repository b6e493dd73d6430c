"""
Community reporter proxies: story submission, withdrawal, a reporter's own
stories, reporter config and the community feature toggles.

Writes propagate the backend's status and body; missing configuration and
network failures map to 503 and 502.
"""
import logging
from typing import Any, Optional
from urllib.parse import quote

from fastapi import status

from newspulse.domain.schemas import CommunitySettingsResponse, ErrorResponse, MyStoriesResponse
from newspulse.infrastructure.backend_client import (
    BackendClient,
    BackendNotConfiguredError,
    BackendUnavailableError,
    ProxyResult,
    UpstreamResponse,
)
from newspulse.infrastructure.payloads import STORY_LIST_KEYS, extract_first

logger = logging.getLogger(__name__)

BACKEND_URL_MISSING = "BACKEND_URL_MISSING"
UPSTREAM_UNREACHABLE = "UPSTREAM_UNREACHABLE"
CONFIG_UNAVAILABLE = "Could not load community reporter config."


def _error(status_code: int, message: str) -> ProxyResult:
    return ProxyResult(status_code, ErrorResponse(message=message).model_dump())


def _failure(upstream: UpstreamResponse) -> ProxyResult:
    """Propagate a non-2xx upstream response as-is, non-JSON bodies included."""
    if upstream.data is None:
        return ProxyResult(upstream.status_code, upstream.text, raw=True)
    return ProxyResult(upstream.status_code, upstream.data)


class CommunityReporterService:
    """Proxies to the backend's community reporter endpoints."""

    def __init__(self, client: BackendClient, settings_client: Optional[BackendClient] = None):
        """
        Args:
            client: Client for the community reporter origin
            settings_client: Client for the public API origin (feature toggles);
                defaults to `client`
        """
        self.client = client
        self.settings_client = settings_client or client

    async def _write(self, method: str, path: str, **kwargs: Any) -> ProxyResult:
        try:
            upstream = await self.client.request(method, path, **kwargs)
        except BackendNotConfiguredError:
            logger.error(f"Community reporter backend not configured for {path}")
            return _error(status.HTTP_503_SERVICE_UNAVAILABLE, BACKEND_URL_MISSING)
        except BackendUnavailableError:
            return _error(status.HTTP_502_BAD_GATEWAY, UPSTREAM_UNREACHABLE)

        if not upstream.ok:
            logger.warning(f"Community reporter upstream {upstream.status_code} for {path}")
            return _failure(upstream)
        if upstream.data is None:
            return ProxyResult(upstream.status_code, {"ok": True})
        return ProxyResult(upstream.status_code, upstream.data)

    async def submit(self, payload: Any) -> ProxyResult:
        """Forward a story submission. Non-object bodies are sent as {}."""
        body = payload if isinstance(payload, dict) else {}
        return await self._write("POST", "/api/community-reporter/submit", json=body)

    async def withdraw(self, story_id: str, payload: Any = None) -> ProxyResult:
        body = payload if isinstance(payload, dict) else {}
        path = f"/api/public/community-reporter/{quote(story_id, safe='')}/withdraw"
        return await self._write("POST", path, json=body)

    async def my_stories(self, email: str) -> ProxyResult:
        """
        Stories submitted by a reporter, looked up by (lower-cased) email.

        Success is normalized to {ok: true, stories: [...]}.
        """
        try:
            upstream = await self.client.get(
                "/api/community-reporter/my-stories",
                params={"email": email.strip().lower()},
            )
        except BackendNotConfiguredError:
            return _error(status.HTTP_503_SERVICE_UNAVAILABLE, BACKEND_URL_MISSING)
        except BackendUnavailableError:
            return _error(status.HTTP_502_BAD_GATEWAY, UPSTREAM_UNREACHABLE)

        if not upstream.ok:
            return _failure(upstream)

        stories = extract_first(upstream.data, STORY_LIST_KEYS)
        if isinstance(upstream.data, list):
            stories = []
        return ProxyResult(
            status.HTTP_200_OK,
            MyStoriesResponse(stories=[s for s in stories if isinstance(s, dict)]).model_dump(),
        )

    async def config(self) -> ProxyResult:
        """Reporter form configuration. Failures propagate status and body."""
        try:
            upstream = await self.client.get("/api/community-reporter/config")
        except BackendNotConfiguredError:
            return _error(status.HTTP_503_SERVICE_UNAVAILABLE, CONFIG_UNAVAILABLE)
        except BackendUnavailableError:
            return _error(status.HTTP_502_BAD_GATEWAY, CONFIG_UNAVAILABLE)

        if not upstream.ok:
            if upstream.data is None:
                return _error(upstream.status_code, CONFIG_UNAVAILABLE)
            return ProxyResult(upstream.status_code, upstream.data)
        if upstream.data is None:
            return ProxyResult(upstream.status_code, {"ok": False})
        return ProxyResult(upstream.status_code, upstream.data)

    async def settings(self) -> CommunitySettingsResponse:
        """Community feature toggles; everything open when unavailable."""
        default = CommunitySettingsResponse()
        if not self.settings_client.configured:
            logger.warning("API base not set; community settings use defaults")
            return default

        try:
            upstream = await self.settings_client.get(
                "/api/public/feature-toggles",
                headers={"Cache-Control": "no-store"},
            )
        except BackendUnavailableError:
            return default

        if not upstream.ok or not isinstance(upstream.data, dict):
            logger.warning(f"Feature toggles returned {upstream.status_code}; using defaults")
            return default

        toggles = upstream.data.get("settings") or upstream.data
        if not isinstance(toggles, dict):
            return default
        updated_at = toggles.get("updatedAt")
        return CommunitySettingsResponse(
            community_reporter_closed=bool(toggles.get("communityReporterClosed")),
            reporter_portal_closed=bool(toggles.get("reporterPortalClosed")),
            updated_at=updated_at if isinstance(updated_at, str) else None,
        )
