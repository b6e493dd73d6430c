"""
Tests for the community reporter proxy endpoints.
"""
import httpx
import pytest

from helpers import build_app, client_for, json_response


@pytest.mark.asyncio
async def test_submit_forwards_body(with_backend):
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["body"] = request.read()
        return json_response(201, {"ok": True, "id": "story-1"})

    async with client_for(build_app(handler)) as client:
        response = await client.post("/api/community-reporter/submit", json={"title": "Pothole on MG Road"})

    assert response.status_code == 201
    assert response.json() == {"ok": True, "id": "story-1"}
    assert seen["path"] == "/api/community-reporter/submit"
    assert b"Pothole on MG Road" in seen["body"]


@pytest.mark.asyncio
async def test_submit_failure_propagates_status_and_body(with_backend):
    async with client_for(build_app(lambda request: json_response(422, {"ok": False, "message": "Title too short"}))) as client:
        response = await client.post("/api/community-reporter/submit", json={"title": "x"})

    assert response.status_code == 422
    assert response.json() == {"ok": False, "message": "Title too short"}


@pytest.mark.asyncio
async def test_submit_non_json_success(with_backend):
    async with client_for(build_app(lambda request: httpx.Response(200, text="OK"))) as client:
        response = await client.post("/api/community-reporter/submit", json={})

    assert response.status_code == 200
    assert response.json() == {"ok": True}


@pytest.mark.asyncio
async def test_submit_without_backend(no_backend):
    async with client_for(build_app()) as client:
        response = await client.post("/api/community-reporter/submit", json={})

    assert response.status_code == 503
    assert response.json() == {"ok": False, "message": "BACKEND_URL_MISSING"}


@pytest.mark.asyncio
async def test_submit_backend_unreachable(with_backend):
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    async with client_for(build_app(handler)) as client:
        response = await client.post("/api/community-reporter/submit", json={})

    assert response.status_code == 502
    assert response.json() == {"ok": False, "message": "UPSTREAM_UNREACHABLE"}


@pytest.mark.asyncio
async def test_withdraw_uses_public_path(with_backend):
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        return json_response(409, {"ok": False, "message": "Already published"})

    async with client_for(build_app(handler)) as client:
        response = await client.post("/api/community-reporter/abc123/withdraw")

    assert seen["path"] == "/api/public/community-reporter/abc123/withdraw"
    assert response.status_code == 409
    assert response.json()["message"] == "Already published"


@pytest.mark.asyncio
async def test_community_origin_overrides_api_base(with_backend, monkeypatch):
    monkeypatch.setenv("COMMUNITY_API_BASE", "http://community.test")
    seen = {}

    def handler(request):
        seen["host"] = request.url.host
        return json_response(200, {"ok": True})

    async with client_for(build_app(handler)) as client:
        await client.post("/api/community-reporter/submit", json={})

    assert seen["host"] == "community.test"


@pytest.mark.asyncio
async def test_my_stories_normalizes_and_lowercases_email(with_backend):
    seen = {}

    def handler(request):
        seen["email"] = request.url.params["email"]
        return json_response(200, {"data": {"stories": [{"id": "s1", "status": "pending"}]}})

    async with client_for(build_app(handler)) as client:
        response = await client.get("/api/community-reporter/my-stories", params={"email": " Asha@Example.COM "})

    assert seen["email"] == "asha@example.com"
    assert response.status_code == 200
    assert response.json() == {"ok": True, "stories": [{"id": "s1", "status": "pending"}]}


@pytest.mark.asyncio
async def test_my_stories_requires_email(with_backend):
    async with client_for(build_app(lambda request: json_response(200, {}))) as client:
        response = await client.get("/api/community-reporter/my-stories")

    assert response.status_code == 400
    assert response.json()["ok"] is False


@pytest.mark.asyncio
async def test_my_stories_failure_propagates(with_backend):
    async with client_for(build_app(lambda request: json_response(403, {"message": "forbidden"}))) as client:
        response = await client.get("/api/community-reporter/my-stories?email=a@b.c")

    assert response.status_code == 403
    assert response.json() == {"message": "forbidden"}


@pytest.mark.asyncio
async def test_config_failure_default_message(with_backend):
    async with client_for(build_app(lambda request: httpx.Response(500, text="boom"))) as client:
        response = await client.get("/api/community-reporter/config")

    assert response.status_code == 500
    assert response.json() == {"ok": False, "message": "Could not load community reporter config."}


@pytest.mark.asyncio
async def test_community_settings(with_backend):
    def handler(request):
        assert request.url.path == "/api/public/feature-toggles"
        return json_response(200, {"settings": {"communityReporterClosed": True, "updatedAt": "2026-01-01T00:00:00Z"}})

    async with client_for(build_app(handler)) as client:
        response = await client.get("/api/public/community/settings")

    assert response.json() == {
        "communityReporterClosed": True,
        "reporterPortalClosed": False,
        "updatedAt": "2026-01-01T00:00:00Z",
    }


@pytest.mark.asyncio
async def test_community_settings_default_open(no_backend):
    async with client_for(build_app()) as client:
        response = await client.get("/api/public/community/settings")

    assert response.status_code == 200
    assert response.json() == {"communityReporterClosed": False, "reporterPortalClosed": False, "updatedAt": None}


@pytest.mark.asyncio
async def test_submit_non_json_failure_body_is_passed_through(with_backend):
    async with client_for(build_app(lambda request: httpx.Response(500, text="upstream exploded"))) as client:
        response = await client.post("/api/community-reporter/submit", json={"title": "Pothole"})

    assert response.status_code == 500
    assert response.text == "upstream exploded"
    assert response.headers["content-type"].startswith("text/plain")


@pytest.mark.asyncio
async def test_withdraw_and_my_stories_pass_through_html_errors(with_backend):
    page = "<html><body>Bad Gateway</body></html>"

    async with client_for(build_app(lambda request: httpx.Response(502, text=page))) as client:
        withdraw = await client.post("/api/community-reporter/abc/withdraw")
        stories = await client.get("/api/community-reporter/my-stories?email=a@b.c")

    assert withdraw.status_code == 502
    assert withdraw.text == page
    assert stories.status_code == 502
    assert stories.text == page
