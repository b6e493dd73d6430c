"""
HTTP client for the News Pulse backend REST API.
Every proxy endpoint and server-side page fetch goes through BackendClient.
"""
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import httpx

from newspulse.infrastructure.payloads import parse_json_text

logger = logging.getLogger(__name__)


class BackendUnavailableError(Exception):
    """Backend could not be reached (network failure, timeout)."""


class BackendNotConfiguredError(BackendUnavailableError):
    """No backend origin is configured."""


def normalize_origin(raw: Optional[str]) -> str:
    """
    Normalize a configured backend base URL to a bare origin.

    Trims whitespace, trailing slashes and a trailing "/api" so paths like
    "/api/public/news" can be appended safely.
    """
    origin = str(raw or "").strip().rstrip("/")
    if origin.endswith("/api"):
        origin = origin[: -len("/api")].rstrip("/")
    return origin


@dataclass
class UpstreamResponse:
    """A completed upstream call. `data` is None when the body is not JSON."""
    status_code: int
    text: str
    data: Any = None
    url: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


@dataclass
class ProxyResult:
    """
    Status code and body to return to the browser.

    `body` is JSON-serializable, or the raw upstream text when `raw` is set.
    """
    status_code: int
    body: Any
    cacheable: bool = False
    raw: bool = False


class BackendClient:
    """
    Thin async wrapper around httpx for backend calls.

    Raises BackendUnavailableError for transport failures; HTTP error
    statuses are returned as UpstreamResponse so callers decide whether to
    fail open or propagate.
    """

    def __init__(
        self,
        origin: Optional[str],
        timeout_seconds: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize backend client.

        Args:
            origin: Backend base URL (normalized; may be empty)
            timeout_seconds: Default HTTP timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.origin = normalize_origin(origin)
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.origin)

    def url(self, path: str) -> str:
        return f"{self.origin}{path}"

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout_seconds: Optional[float] = None,
    ) -> UpstreamResponse:
        """
        Call the backend.

        Args:
            method: HTTP method
            path: Path starting with "/", appended to the origin
            params: Query parameters
            json: JSON body for writes
            headers: Extra request headers
            timeout_seconds: Per-call timeout override

        Returns:
            UpstreamResponse for any HTTP status

        Raises:
            BackendNotConfiguredError: no origin configured
            BackendUnavailableError: network error or timeout
        """
        if not self.configured:
            raise BackendNotConfiguredError("Backend origin is not configured")

        request_headers = {"Accept": "application/json"}
        if headers:
            request_headers.update(headers)

        url = self.url(path)
        timeout = timeout_seconds if timeout_seconds is not None else self.timeout_seconds

        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self.transport) as client:
                response = await client.request(
                    method,
                    url,
                    params=params,
                    json=json,
                    headers=request_headers,
                )
                text = response.text
        except httpx.TimeoutException as e:
            logger.warning(f"Backend timeout for {method} {url}")
            raise BackendUnavailableError(f"Timeout calling {url}") from e
        except httpx.HTTPError as e:
            logger.warning(f"Backend request failed for {method} {url}: {e}")
            raise BackendUnavailableError(str(e)) from e

        if response.status_code >= 400:
            logger.info(f"Backend returned {response.status_code} for {method} {url}")

        return UpstreamResponse(
            status_code=response.status_code,
            text=text,
            data=parse_json_text(text),
            url=str(response.request.url),
        )

    async def get(self, path: str, **kwargs: Any) -> UpstreamResponse:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> UpstreamResponse:
        return await self.request("POST", path, **kwargs)
