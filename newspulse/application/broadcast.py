"""
Breaking and live broadcast tickers.

normalize_public_broadcast() turns any of the backend's broadcast envelopes
into a PublicBroadcastResponse; BroadcastService fetches it, falling back to
the older per-type item endpoints when the combined endpoint is missing.
"""
import asyncio
import logging
import math
from typing import Any, Mapping, Optional

from newspulse.domain.models import BroadcastMode, BroadcastType
from newspulse.domain.schemas import (
    BroadcastItems,
    BroadcastMeta,
    BroadcastSettings,
    BroadcastTickerSettings,
    PublicBroadcastResponse,
)
from newspulse.i18n.locale import Locale
from newspulse.infrastructure.backend_client import BackendClient, BackendUnavailableError

logger = logging.getLogger(__name__)

MIN_SPEED_SEC = 5
MAX_SPEED_SEC = 300
DEFAULT_SPEED_SEC = {BroadcastType.BREAKING: 18, BroadcastType.LIVE: 24}

_SETTINGS_MARKERS = ("enabled", "mode", "speedSec", "speedSeconds")


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def clamp_speed(value: Any, fallback: float) -> float:
    """Clamp a ticker speed to [5, 300] seconds; non-numbers fall back."""
    if isinstance(value, bool):
        return fallback
    try:
        speed = float(value)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(speed):
        return fallback
    return min(MAX_SPEED_SEC, max(MIN_SPEED_SEC, speed))


def normalize_mode(value: Any) -> BroadcastMode:
    try:
        return BroadcastMode(str(value or "").strip().upper())
    except ValueError:
        return BroadcastMode.AUTO


def _ticker_settings(raw: Any, kind: BroadcastType) -> BroadcastTickerSettings:
    raw = _as_dict(raw)
    enabled = raw.get("enabled")
    speed = raw.get("speedSec", raw.get("speedSeconds"))
    return BroadcastTickerSettings(
        enabled=bool(enabled) if enabled is not None else True,
        mode=normalize_mode(raw.get("mode")),
        speed_sec=clamp_speed(speed, DEFAULT_SPEED_SEC[kind]),
    )


def _raw_ticker_settings(settings_raw: dict, kind: BroadcastType) -> Any:
    name = kind.value
    for candidate in (
        settings_raw.get(name),
        _as_dict(settings_raw.get("tickers")).get(name),
        settings_raw.get(f"{name}Ticker"),
    ):
        if candidate is not None:
            return candidate
    return None


def _has_settings(raw: Any) -> bool:
    return isinstance(raw, dict) and any(marker in raw for marker in _SETTINGS_MARKERS)


def normalize_public_broadcast(raw: Any) -> PublicBroadcastResponse:
    """
    Normalize a broadcast payload.

    Settings may live under `settings` or `data.settings`, per-ticker
    settings under `breaking`, `tickers.breaking` or `breakingTicker`
    (likewise for live). Items may be `{breaking, live}` or a flat list of
    items carrying a `type`.
    """
    root = _as_dict(raw)
    data = root.get("data")

    settings_raw = _as_dict(root.get("settings") or _as_dict(data).get("settings"))
    items_raw = root.get("items")
    if items_raw is None:
        items_raw = _as_dict(data).get("items", data)

    breaking_raw = _raw_ticker_settings(settings_raw, BroadcastType.BREAKING)
    live_raw = _raw_ticker_settings(settings_raw, BroadcastType.LIVE)

    meta_raw = _as_dict(root.get("_meta"))
    if meta_raw.get("hasSettings") is not None:
        has_settings = bool(meta_raw["hasSettings"])
    else:
        has_settings = _has_settings(breaking_raw) or _has_settings(live_raw)

    items_dict = _as_dict(items_raw)
    breaking = _as_list(items_dict.get("breaking"))
    live = _as_list(items_dict.get("live"))

    if not breaking and not live:
        flat = _as_list(items_raw)
        breaking = [i for i in flat if _item_type(i) == BroadcastType.BREAKING.value]
        live = [i for i in flat if _item_type(i) == BroadcastType.LIVE.value]

    return PublicBroadcastResponse(
        ok=root.get("ok") is not False,
        meta=BroadcastMeta(has_settings=has_settings),
        settings=BroadcastSettings(
            breaking=_ticker_settings(breaking_raw, BroadcastType.BREAKING),
            live=_ticker_settings(live_raw, BroadcastType.LIVE),
        ),
        items=BroadcastItems(
            breaking=[i for i in breaking if isinstance(i, dict)],
            live=[i for i in live if isinstance(i, dict)],
        ),
    )


def _item_type(item: Any) -> str:
    return str(_as_dict(item).get("type") or "").lower()


def should_render_ticker(settings: Optional[BroadcastTickerSettings]) -> bool:
    """FORCE_OFF hides, FORCE_ON shows, AUTO follows `enabled`."""
    if settings is None:
        return False
    if settings.mode == BroadcastMode.FORCE_OFF:
        return False
    if settings.mode == BroadcastMode.FORCE_ON:
        return True
    return settings.enabled is True


def item_to_ticker_text(item: Any) -> Optional[str]:
    item = _as_dict(item)
    text = item.get("text")
    if text is None:
        text = item.get("title")
    text = str(text if text is not None else "").strip()
    return text or None


def to_ticker_texts(items: list) -> list[str]:
    return [text for text in (item_to_ticker_text(i) for i in items or []) if text]


class BroadcastService:
    """Fetches broadcast settings and items from the backend."""

    def __init__(self, client: BackendClient):
        self.client = client

    async def fetch(
        self,
        locale: Optional[Locale] = None,
        forward_headers: Optional[Mapping[str, str]] = None,
    ) -> PublicBroadcastResponse:
        """
        Current broadcast state.

        Prefers the combined /api/public/broadcast endpoint; otherwise
        gathers breaking items, live items and settings concurrently.
        Falls back to default tickers with no items.
        """
        if not self.client.configured:
            return PublicBroadcastResponse()

        params = {"lang": locale.value} if locale is not None else None
        headers = dict(forward_headers or {})

        try:
            upstream = await self.client.get(
                "/api/public/broadcast",
                params=params,
                headers={**headers, "Cache-Control": "no-store", "Pragma": "no-cache"},
            )
            if upstream.ok and upstream.data:
                return normalize_public_broadcast(upstream.data)
        except BackendUnavailableError:
            logger.info("Combined broadcast endpoint unavailable; trying item endpoints")

        try:
            breaking, live, settings = await asyncio.gather(
                self._fetch_items(BroadcastType.BREAKING, locale, headers),
                self._fetch_items(BroadcastType.LIVE, locale, headers),
                self._fetch_settings(headers),
            )
        except BackendUnavailableError:
            logger.warning("Broadcast unavailable; using default tickers")
            return PublicBroadcastResponse()

        settings = _as_dict(settings)
        return normalize_public_broadcast({
            "ok": True,
            "settings": settings.get("settings", settings),
            "items": {"breaking": breaking, "live": live},
        })

    async def _fetch_items(
        self,
        kind: BroadcastType,
        locale: Optional[Locale],
        headers: Mapping[str, str],
    ) -> list:
        params = {"type": kind.value}
        if locale is not None:
            params["lang"] = locale.value
        upstream = await self.client.get("/api/public/broadcast/items", params=params, headers=headers)
        if not upstream.ok or not upstream.data:
            return []
        data = upstream.data
        if isinstance(data, list):
            return data
        for key in ("items", "data"):
            if isinstance(_as_dict(data).get(key), list):
                return data[key]
        return []

    async def _fetch_settings(self, headers: Mapping[str, str]) -> Any:
        upstream = await self.client.get("/api/public/broadcast/settings", headers=headers)
        if not upstream.ok or not upstream.data:
            return None
        return upstream.data

    async def breaking_texts(self, locale: Optional[Locale] = None) -> list[str]:
        """Texts for the breaking ticker, empty when it should not render."""
        broadcast = await self.fetch(locale)
        if not should_render_ticker(broadcast.settings.breaking):
            return []
        return to_ticker_texts(broadcast.items.breaking)
