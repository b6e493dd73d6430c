"""
Main FastAPI application entrypoint.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from newspulse import __version__
from newspulse.api.ads import router as ads_router
from newspulse.api.broadcast import router as broadcast_router
from newspulse.api.community_reporter import router as community_reporter_router
from newspulse.api.health import router as health_router
from newspulse.api.news import router as news_router
from newspulse.api.pages import router as pages_router
from newspulse.api.settings import router as settings_router
from newspulse.application.broadcast import BroadcastService
from newspulse.application.ticker import TickerPoller
from newspulse.config import Settings, settings as default_settings
from newspulse.i18n.middleware import LocaleMiddleware
from newspulse.infrastructure.backend_client import BackendClient
from newspulse.infrastructure.ttl_cache import TTLCache

logger = logging.getLogger(__name__)


def build_ticker_poller(settings: Settings) -> TickerPoller:
    """Poller that keeps the breaking ticker texts for server-rendered pages."""
    service = BroadcastService(
        BackendClient(settings.api_base, timeout_seconds=settings.upstream_timeout_seconds)
    )
    return TickerPoller(
        service.breaking_texts,
        interval_seconds=settings.ticker_poll_interval_seconds,
        retry_base_seconds=settings.ticker_retry_base_seconds,
        max_retries=settings.ticker_max_retries,
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Startup settings; request handlers still re-read the
            environment through get_settings()
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Lifespan event handler for startup and shutdown.
        """
        # Startup
        logging.basicConfig(
            level=settings.log_level.upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        logger.info(f"Starting News Pulse on {settings.host}:{settings.port}")
        logger.info(f"Debug mode: {settings.debug}")
        if not settings.api_base:
            logger.warning("No backend origin configured; public endpoints will serve defaults")

        if settings.ticker_polling_enabled:
            app.state.ticker_poller = build_ticker_poller(settings)
            app.state.ticker_poller.start()

        yield

        # Shutdown
        poller = getattr(app.state, "ticker_poller", None)
        if poller is not None:
            await poller.stop()
        logger.info("Shutting down News Pulse")

    app = FastAPI(
        title="News Pulse",
        description="Multilingual news site frontend and backend proxy",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.state.ad_settings_cache = TTLCache(ttl_seconds=settings.settings_cache_ttl_seconds)
    app.state.public_mode_cache = TTLCache(ttl_seconds=settings.settings_cache_ttl_seconds)
    app.state.site_settings_cache = TTLCache(ttl_seconds=settings.settings_cache_ttl_seconds)
    app.state.ticker_poller = None

    app.add_middleware(LocaleMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    # Register routers
    app.include_router(health_router, prefix="/api")
    app.include_router(news_router, prefix="/api")
    app.include_router(ads_router, prefix="/api")
    app.include_router(settings_router, prefix="/api")
    app.include_router(broadcast_router, prefix="/api")
    app.include_router(community_reporter_router, prefix="/api")

    @app.get("/api", tags=["health"])
    async def api_info():
        """API information."""
        return {
            "name": "News Pulse",
            "version": __version__,
            "status": "running",
            "docs": "/docs",
        }

    # Pages last: "/{category}" would otherwise shadow single-segment routes
    app.include_router(pages_router)

    return app


app = create_app()


def run() -> None:
    """Serve the app with uvicorn using the configured host and port."""
    import uvicorn

    uvicorn.run(
        "newspulse.main:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.debug,
    )


if __name__ == "__main__":
    run()
