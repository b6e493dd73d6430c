"""
Ad settings, ad slot and ad click services.

Ads fail open in the browser's favour: with no settings every slot is
enabled, and with no ad the slot simply renders nothing.
"""
import logging
from typing import Any, Optional
from urllib.parse import quote

from newspulse.domain.models import AdSlotName
from newspulse.domain.schemas import AdSettingsResponse, AdSlotResponse, AdSlotSettings
from newspulse.infrastructure.backend_client import (
    BackendClient,
    BackendNotConfiguredError,
    BackendUnavailableError,
)
from newspulse.infrastructure.payloads import AD_KEYS, extract_first
from newspulse.infrastructure.ttl_cache import TTLCache

logger = logging.getLogger(__name__)

DEFAULT_AD_SETTINGS = AdSettingsResponse(ok=True, slot_enabled=AdSlotSettings())


def sanitize_ad_settings(upstream: Any) -> AdSettingsResponse:
    """A slot is disabled only when the backend says exactly false."""
    data = upstream if isinstance(upstream, dict) else {}
    raw = data.get("slotEnabled")
    raw = raw if isinstance(raw, dict) else {}

    return AdSettingsResponse(
        ok=data.get("ok") is True,
        slot_enabled=AdSlotSettings(
            HOME_728x90=raw.get(AdSlotName.HOME_728X90.value) is not False,
            HOME_RIGHT_300x250=raw.get(AdSlotName.HOME_RIGHT_300X250.value) is not False,
        ),
    )


def is_ad_slot_enabled(settings: Optional[AdSettingsResponse], slot: AdSlotName) -> bool:
    """Missing settings or a missing key means enabled."""
    if settings is None:
        return True
    return getattr(settings.slot_enabled, slot.value, True) is not False


def pick_ad(payload: Any) -> Optional[dict]:
    """Ad object from {ad}, {ads: [...]}, {data: ...}, a bare list or a bare ad."""
    ad = extract_first(payload, AD_KEYS, kind="object")
    if ad is not None:
        return ad
    if isinstance(payload, dict) and payload:
        return payload
    return None


class AdSettingsService:
    """Public ad settings behind a TTL cache."""

    def __init__(self, client: BackendClient, cache: TTLCache[AdSettingsResponse]):
        self.client = client
        self.cache = cache

    async def get_settings(self) -> AdSettingsResponse:
        """
        Current ad settings.

        Sanitized upstream values (or defaults for a non-2xx/malformed
        response) are cached; an unreachable backend is not.
        """
        try:
            return await self.cache.get_or_load(self._load)
        except BackendNotConfiguredError:
            return DEFAULT_AD_SETTINGS
        except BackendUnavailableError:
            logger.warning("Ad settings unavailable; keeping all slots enabled")
            return DEFAULT_AD_SETTINGS

    async def _load(self) -> AdSettingsResponse:
        upstream = await self.client.get(
            "/api/public/ad-settings",
            headers={"Cache-Control": "no-store", "Pragma": "no-cache"},
        )
        if upstream.ok and upstream.data:
            return sanitize_ad_settings(upstream.data)
        return DEFAULT_AD_SETTINGS


class AdService:
    """Ad creative per slot and click tracking."""

    def __init__(self, client: BackendClient):
        self.client = client

    async def get_slot_ad(self, slot: str) -> AdSlotResponse:
        """
        Ad for a slot.

        Tries /api/public/ads/slot/<slot> first, then the older
        /api/public/ads?slot=<slot>. Ads without an imageUrl are dropped.
        """
        if not self.client.configured:
            return AdSlotResponse(ok=False, ad=None)

        try:
            preferred = await self.client.get(f"/api/public/ads/slot/{quote(slot, safe='')}")
            if preferred.ok:
                return AdSlotResponse(ok=True, ad=self._displayable(pick_ad(preferred.data)))

            fallback = await self.client.get("/api/public/ads", params={"slot": slot})
        except BackendUnavailableError:
            return AdSlotResponse(ok=False, ad=None)

        ad = pick_ad(fallback.data) if fallback.ok else None
        return AdSlotResponse(ok=fallback.ok, ad=self._displayable(ad))

    async def track_click(self, ad_id: str, method: str = "POST") -> Any:
        """Forward an ad click. Never fails."""
        if not self.client.configured:
            return {"ok": False}
        try:
            upstream = await self.client.request(method, f"/api/public/ads/{quote(ad_id, safe='')}/click")
        except BackendUnavailableError:
            return {"ok": False}
        if not upstream.text or upstream.data is None:
            return {"ok": upstream.ok}
        return upstream.data

    @staticmethod
    def _displayable(ad: Optional[dict]) -> Optional[dict]:
        if ad and ad.get("imageUrl"):
            return ad
        return None
