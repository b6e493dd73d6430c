"""
Tests for server-rendered pages.
"""
import pytest

from helpers import build_app, client_for, json_response
from newspulse.api.pages import language_switch_path
from newspulse.i18n.locale import Locale


def site_backend(requested):
    def handler(request):
        path = request.url.path
        requested.append(path)
        if path == "/api/public/news":
            return json_response(200, {"items": [
                {"_id": "a1", "title": "Budget 2026 unveiled", "slug": "budget-2026", "summary": "Key points"},
            ]})
        if path == "/api/public/broadcast":
            return json_response(200, {"items": {"breaking": [{"text": "Cyclone warning for coast"}]}})
        if path == "/api/public/ad-settings":
            return json_response(200, {"ok": True, "slotEnabled": {"HOME_728x90": False}})
        if path == "/api/public/ads/slot/HOME_RIGHT_300x250":
            return json_response(200, {"ad": {"_id": "ad9", "imageUrl": "https://cdn.test/ad.png"}})
        if path == "/api/articles/budget-2026":
            return json_response(200, {"article": {"_id": "a1", "title": "Budget 2026 unveiled", "content": "Full text"}})
        return json_response(404, {})
    return handler


def test_language_switch_path():
    assert language_switch_path(Locale.HINDI, "/sports") == "/hi/sports"
    assert language_switch_path(Locale.ENGLISH, "/sports") == "/en/sports"
    assert language_switch_path(Locale.ENGLISH, "/") == "/en"
    assert language_switch_path(Locale.GUJARATI, "/") == "/gu"


@pytest.mark.asyncio
async def test_home_page(with_backend):
    requested = []
    async with client_for(build_app(site_backend(requested))) as client:
        response = await client.get("/")

    assert response.status_code == 200
    html = response.text
    assert "Top Stories" in html
    assert "Budget 2026 unveiled" in html
    assert 'href="/news/budget-2026"' in html
    assert "Cyclone warning for coast" in html
    assert "https://cdn.test/ad.png" in html
    assert 'data-slot="HOME_728x90"' not in html
    assert "/api/public/ads/slot/HOME_728x90" not in requested


@pytest.mark.asyncio
async def test_home_page_in_hindi_links_stay_prefixed(with_backend):
    requested = []
    async with client_for(build_app(site_backend(requested))) as client:
        response = await client.get("/hi")

    assert response.status_code == 200
    html = response.text
    assert 'href="/hi/news/budget-2026"' in html
    assert 'href="/hi/sports"' in html
    assert 'href="/en"' in html


@pytest.mark.asyncio
async def test_home_page_without_backend(no_backend):
    async with client_for(build_app()) as client:
        response = await client.get("/")

    assert response.status_code == 200
    assert "No stories published yet." in response.text
    assert "No breaking news right now." in response.text


@pytest.mark.asyncio
async def test_category_page_without_backend(no_backend):
    async with client_for(build_app()) as client:
        response = await client.get("/gu/business")

    assert response.status_code == 200
    assert "વેપાર" in response.text


@pytest.mark.asyncio
async def test_unknown_category_is_404(no_backend):
    async with client_for(build_app()) as client:
        response = await client.get("/not-a-category")

    assert response.status_code == 404
    assert "Page not found" in response.text


@pytest.mark.asyncio
async def test_article_page(with_backend):
    requested = []
    async with client_for(build_app(site_backend(requested))) as client:
        response = await client.get("/news/budget-2026")

    assert response.status_code == 200
    assert "Budget 2026 unveiled" in response.text
    assert "Full text" in response.text


@pytest.mark.asyncio
async def test_missing_article_is_404(with_backend):
    requested = []
    async with client_for(build_app(site_backend(requested))) as client:
        response = await client.get("/news/ghost")

    assert response.status_code == 404
    assert "Article not found" in response.text
