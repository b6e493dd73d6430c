"""
Tests for broadcast normalization, ticker rendering and the broadcast endpoint.
"""
import httpx
import pytest

from helpers import build_app, client_for, json_response
from newspulse.application.broadcast import (
    BroadcastService,
    clamp_speed,
    item_to_ticker_text,
    normalize_public_broadcast,
    should_render_ticker,
    to_ticker_texts,
)
from newspulse.domain.models import BroadcastMode
from newspulse.domain.schemas import BroadcastTickerSettings
from newspulse.i18n.locale import Locale
from newspulse.infrastructure.backend_client import BackendClient


class TestNormalizePublicBroadcast:

    def test_defaults(self):
        broadcast = normalize_public_broadcast(None)

        assert broadcast.ok is True
        assert broadcast.meta.has_settings is False
        assert broadcast.settings.breaking.speed_sec == 18
        assert broadcast.settings.live.speed_sec == 24
        assert broadcast.settings.breaking.mode == BroadcastMode.AUTO
        assert broadcast.items.breaking == []

    def test_nested_settings_and_grouped_items(self):
        broadcast = normalize_public_broadcast({
            "data": {
                "settings": {
                    "tickers": {"breaking": {"enabled": False, "mode": "force_on", "speedSec": 1}},
                    "liveTicker": {"speedSeconds": 999},
                },
                "items": {"breaking": [{"text": "Quake"}], "live": [{"title": "Match live"}]},
            }
        })

        assert broadcast.meta.has_settings is True
        assert broadcast.settings.breaking.enabled is False
        assert broadcast.settings.breaking.mode == BroadcastMode.FORCE_ON
        assert broadcast.settings.breaking.speed_sec == 5
        assert broadcast.settings.live.speed_sec == 300
        assert broadcast.items.breaking == [{"text": "Quake"}]
        assert broadcast.items.live == [{"title": "Match live"}]

    def test_flat_typed_list(self):
        broadcast = normalize_public_broadcast({
            "ok": False,
            "items": [
                {"type": "breaking", "text": "A"},
                {"type": "LIVE", "text": "B"},
                {"type": "other", "text": "C"},
            ],
        })

        assert broadcast.ok is False
        assert to_ticker_texts(broadcast.items.breaking) == ["A"]
        assert to_ticker_texts(broadcast.items.live) == ["B"]

    def test_meta_flag_overrides_detection(self):
        broadcast = normalize_public_broadcast({"_meta": {"hasSettings": True}})
        assert broadcast.meta.has_settings is True


def test_clamp_speed():
    assert clamp_speed("20", 18) == 20
    assert clamp_speed(None, 18) == 18
    assert clamp_speed(float("nan"), 24) == 24
    assert clamp_speed(True, 18) == 18


@pytest.mark.parametrize(
    "mode, enabled, expected",
    [
        (BroadcastMode.FORCE_OFF, True, False),
        (BroadcastMode.FORCE_ON, False, True),
        (BroadcastMode.AUTO, True, True),
        (BroadcastMode.AUTO, False, False),
    ],
)
def test_should_render_ticker(mode, enabled, expected):
    assert should_render_ticker(BroadcastTickerSettings(mode=mode, enabled=enabled)) is expected


def test_ticker_texts():
    assert item_to_ticker_text({"text": "  Hello  "}) == "Hello"
    assert item_to_ticker_text({"title": "Fallback"}) == "Fallback"
    assert item_to_ticker_text({"text": "   "}) is None
    assert to_ticker_texts([{"text": "a"}, {"text": ""}, {"title": "b"}, "junk"]) == ["a", "b"]


class TestBroadcastService:

    @pytest.mark.asyncio
    async def test_combined_endpoint(self):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return json_response(200, {"items": {"breaking": [{"text": "Flood alert"}]}})

        service = BroadcastService(BackendClient("http://backend.test", transport=httpx.MockTransport(handler)))
        texts = await service.breaking_texts(Locale.GUJARATI)

        assert texts == ["Flood alert"]
        assert seen == ["http://backend.test/api/public/broadcast?lang=gu"]

    @pytest.mark.asyncio
    async def test_fallback_to_item_endpoints(self):
        def handler(request):
            path = request.url.path
            if path == "/api/public/broadcast":
                return json_response(404, {})
            if path == "/api/public/broadcast/items":
                kind = request.url.params["type"]
                return json_response(200, {"items": [{"text": f"{kind} item"}]})
            if path == "/api/public/broadcast/settings":
                return json_response(200, {"settings": {"live": {"mode": "FORCE_OFF"}}})
            return json_response(500, {})

        service = BroadcastService(BackendClient("http://backend.test", transport=httpx.MockTransport(handler)))
        broadcast = await service.fetch()

        assert to_ticker_texts(broadcast.items.breaking) == ["breaking item"]
        assert to_ticker_texts(broadcast.items.live) == ["live item"]
        assert broadcast.settings.live.mode == BroadcastMode.FORCE_OFF
        assert broadcast.meta.has_settings is True

    @pytest.mark.asyncio
    async def test_unreachable_backend_uses_defaults(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        service = BroadcastService(BackendClient("http://backend.test", transport=httpx.MockTransport(handler)))
        broadcast = await service.fetch()

        assert broadcast.items.breaking == []
        assert broadcast.settings.breaking.speed_sec == 18


@pytest.mark.asyncio
async def test_broadcast_endpoint_without_backend(no_backend):
    async with client_for(build_app()) as client:
        response = await client.get("/api/public/broadcast?lang=hi")

    assert response.status_code == 200
    data = response.json()
    assert data["settings"]["breaking"] == {"enabled": True, "mode": "AUTO", "speedSec": 18}
    assert data["settings"]["live"]["speedSec"] == 24
    assert data["items"] == {"breaking": [], "live": []}
    assert response.headers["pragma"] == "no-cache"
