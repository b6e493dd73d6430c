"""
FastAPI dependencies wiring settings, backend clients and services.

Settings are re-read per request so the backend origin is resolved at
request time. Caches and the ticker poller live on app.state.
"""
from typing import Optional

from fastapi import Depends, Request

from newspulse.application.ads import AdService, AdSettingsService
from newspulse.application.broadcast import BroadcastService
from newspulse.application.category_news import CategoryNewsFetcher
from newspulse.application.community_reporter import CommunityReporterService
from newspulse.application.news import NewsService
from newspulse.application.public_mode import PublicModeService
from newspulse.application.site_settings import PublicSiteSettingsService
from newspulse.application.ticker import TickerPoller
from newspulse.config import Settings, get_settings
from newspulse.i18n.locale import Locale
from newspulse.infrastructure.backend_client import BackendClient

# Request headers passed through to the backend for personalized reads
FORWARDED_HEADERS = ("cookie", "authorization")


def get_backend_client(request: Request, settings: Settings = Depends(get_settings)) -> BackendClient:
    return BackendClient(
        settings.api_base,
        timeout_seconds=settings.upstream_timeout_seconds,
        transport=getattr(request.app.state, "backend_transport", None),
    )


def get_community_client(request: Request, settings: Settings = Depends(get_settings)) -> BackendClient:
    return BackendClient(
        settings.community_origin,
        timeout_seconds=settings.upstream_timeout_seconds,
        transport=getattr(request.app.state, "backend_transport", None),
    )


def get_news_service(
    client: BackendClient = Depends(get_backend_client),
    settings: Settings = Depends(get_settings),
) -> NewsService:
    return NewsService(client, stories_timeout_seconds=settings.stories_upstream_timeout_seconds)


def get_category_fetcher(client: BackendClient = Depends(get_backend_client)) -> CategoryNewsFetcher:
    return CategoryNewsFetcher(client)


def get_ad_settings_service(
    request: Request,
    client: BackendClient = Depends(get_backend_client),
) -> AdSettingsService:
    return AdSettingsService(client, request.app.state.ad_settings_cache)


def get_ad_service(client: BackendClient = Depends(get_backend_client)) -> AdService:
    return AdService(client)


def get_public_mode_service(
    request: Request,
    client: BackendClient = Depends(get_backend_client),
) -> PublicModeService:
    return PublicModeService(client, request.app.state.public_mode_cache)


def get_site_settings_service(
    request: Request,
    client: BackendClient = Depends(get_backend_client),
) -> PublicSiteSettingsService:
    return PublicSiteSettingsService(client, request.app.state.site_settings_cache)


def get_broadcast_service(client: BackendClient = Depends(get_backend_client)) -> BroadcastService:
    return BroadcastService(client)


def get_community_service(
    client: BackendClient = Depends(get_community_client),
    settings_client: BackendClient = Depends(get_backend_client),
) -> CommunityReporterService:
    return CommunityReporterService(client, settings_client=settings_client)


def get_ticker_poller(request: Request) -> Optional[TickerPoller]:
    return getattr(request.app.state, "ticker_poller", None)


def get_request_locale(request: Request) -> Locale:
    """Locale chosen by LocaleMiddleware for this request."""
    return getattr(request.state, "locale", None) or Locale.default()


def forward_headers(request: Request) -> dict[str, str]:
    return {name: request.headers[name] for name in FORWARDED_HEADERS if name in request.headers}
