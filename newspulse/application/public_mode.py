"""
Global public site mode (NORMAL / READONLY / LOCKDOWN).
"""
import logging
from typing import Any

from newspulse.domain.models import PublicMode
from newspulse.domain.schemas import PublicModeResponse
from newspulse.infrastructure.backend_client import (
    BackendClient,
    BackendNotConfiguredError,
    BackendUnavailableError,
)
from newspulse.infrastructure.ttl_cache import TTLCache

logger = logging.getLogger(__name__)

DEFAULT_PUBLIC_MODE = PublicModeResponse()


def sanitize_public_mode(data: Any) -> PublicModeResponse:
    """Coerce a backend payload into a PublicModeResponse."""
    if not isinstance(data, dict):
        return DEFAULT_PUBLIC_MODE

    try:
        mode = PublicMode(data.get("mode"))
    except ValueError:
        mode = PublicMode.NORMAL

    message = data.get("message")
    return PublicModeResponse(
        ok=data.get("ok") is True,
        mode=mode,
        read_only=bool(data.get("readOnly")),
        external_fetch=data.get("externalFetch") is not False,
        message=message if isinstance(message, str) else None,
    )


class PublicModeService:
    """Reads /api/system/public-mode behind a TTL cache."""

    def __init__(self, client: BackendClient, cache: TTLCache[PublicModeResponse]):
        self.client = client
        self.cache = cache

    async def get_mode(self) -> PublicModeResponse:
        try:
            return await self.cache.get_or_load(self._load)
        except BackendNotConfiguredError:
            return DEFAULT_PUBLIC_MODE
        except BackendUnavailableError:
            logger.warning("Public mode unavailable; assuming NORMAL")
            return DEFAULT_PUBLIC_MODE

    async def _load(self) -> PublicModeResponse:
        upstream = await self.client.get("/api/system/public-mode")
        if not upstream.ok:
            logger.warning(f"Public mode returned {upstream.status_code}; assuming NORMAL")
            return DEFAULT_PUBLIC_MODE
        if not isinstance(upstream.data, dict):
            logger.warning("Public mode returned invalid JSON; assuming NORMAL")
            return DEFAULT_PUBLIC_MODE
        return sanitize_public_mode(upstream.data)
