"""
Test helpers: an app wired to a fake backend through httpx.MockTransport.
"""
import json

import httpx

from newspulse.main import create_app

BACKEND_ORIGIN = "http://backend.test"


def json_response(status_code, payload):
    return httpx.Response(
        status_code,
        content=json.dumps(payload).encode(),
        headers={"Content-Type": "application/json"},
    )


def build_app(handler=None):
    """App whose backend calls go to `handler` instead of the network."""
    app = create_app()
    if handler is not None:
        app.state.backend_transport = httpx.MockTransport(handler)
    return app


def client_for(app, **kwargs):
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test", **kwargs)


def set_cookies(response):
    return response.headers.get_list("set-cookie")
