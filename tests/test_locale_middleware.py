"""
Tests for LocaleMiddleware on real page routes.
"""
import pytest

from helpers import build_app, client_for, set_cookies


@pytest.mark.asyncio
async def test_prefixed_page_is_served_with_cookies(no_backend):
    """GET /hi/sports renders the sports page in Hindi and persists the locale."""
    async with client_for(build_app()) as client:
        response = await client.get("/hi/sports")

    assert response.status_code == 200
    assert response.headers["content-language"] == "hi"
    assert 'lang="hi"' in response.text
    assert "खेल" in response.text

    cookies = set_cookies(response)
    for name in ("np_locale", "np_lang", "NEXT_LOCALE"):
        cookie = next(c for c in cookies if c.startswith(f"{name}="))
        assert cookie.startswith(f"{name}=hi")
        assert "Max-Age=31536000" in cookie
        assert "Path=/" in cookie
        assert "samesite=lax" in cookie.lower()


@pytest.mark.asyncio
async def test_stacked_prefix_redirects(no_backend):
    async with client_for(build_app()) as client:
        response = await client.get("/gu/hi/sports")

    assert response.status_code == 307
    assert response.headers["location"] == "/hi/sports"
    assert any(c.startswith("np_locale=hi") for c in set_cookies(response))


@pytest.mark.asyncio
async def test_english_prefix_redirect_keeps_query(no_backend):
    async with client_for(build_app()) as client:
        response = await client.get("/en/sports?page=2")

    assert response.status_code == 307
    assert response.headers["location"] == "/sports?page=2"
    assert any(c.startswith("np_locale=en") for c in set_cookies(response))


@pytest.mark.asyncio
async def test_cookie_locale_redirects_unprefixed_page(no_backend):
    async with client_for(build_app(), cookies={"np_locale": "gu"}) as client:
        response = await client.get("/sports")

    assert response.status_code == 307
    assert response.headers["location"] == "/gu/sports"
    assert set_cookies(response) == []


@pytest.mark.asyncio
async def test_unprefixed_page_without_cookie_is_english(no_backend):
    async with client_for(build_app()) as client:
        response = await client.get("/sports")

    assert response.status_code == 200
    assert response.headers["content-language"] == "en"
    assert set_cookies(response) == []


@pytest.mark.asyncio
async def test_api_uses_cookie_locale_without_redirect(no_backend):
    async with client_for(build_app(), cookies={"np_lang": "gujarati"}) as client:
        response = await client.get("/api/health")

    assert response.status_code == 200
    assert response.headers["content-language"] == "gu"


@pytest.mark.asyncio
async def test_english_prefix_redirect_stays_on_site(no_backend):
    async with client_for(build_app()) as client:
        response = await client.get("/en//evil.example/phish")

    assert response.status_code == 307
    assert response.headers["location"] == "/evil.example/phish"
