"""
Published public-site settings: which home page modules render, in what
order, and the breaking/live ticker preferences.

The backend has published these under several shapes over time:
- {ok, settings: {modules, tickers}} or {data: {...}}
- {modules, tickers} at the root
- {published: {modules | homepage.modules, tickers}}
- the admin shape {homeModules, ui: {showX: bool}, tickers}

merge_public_settings_with_defaults() accepts all of them. Unknown modules
and tickers are ignored; anything missing keeps its default.
"""
import logging
import math
from typing import Any, Optional

from newspulse.application.broadcast import clamp_speed
from newspulse.domain.models import HomeModuleKey
from newspulse.domain.schemas import (
    HomeModuleSettings,
    LanguageTheme,
    PublicSiteSettings,
    PublicSiteSettingsResponse,
    SiteTickerSettings,
    SiteTickers,
)
from newspulse.i18n.locale import Locale
from newspulse.infrastructure.backend_client import (
    BackendClient,
    BackendNotConfiguredError,
    BackendUnavailableError,
)
from newspulse.infrastructure.ttl_cache import TTLCache

logger = logging.getLogger(__name__)

TICKER_NAMES = ("breaking", "live")

# key -> (enabled, order); orders match the default home page layout
DEFAULT_MODULES: dict[HomeModuleKey, tuple[bool, int]] = {
    HomeModuleKey.CATEGORY_STRIP: (True, 10),
    HomeModuleKey.BREAKING_TICKER: (True, 20),
    HomeModuleKey.LIVE_UPDATES_TICKER: (True, 30),
    HomeModuleKey.TRENDING_STRIP: (True, 40),
    HomeModuleKey.EXPLORE_CATEGORIES: (True, 10),
    HomeModuleKey.LIVE_TV_CARD: (True, 20),
    HomeModuleKey.QUICK_TOOLS: (True, 30),
    HomeModuleKey.SNAPSHOTS: (True, 40),
    HomeModuleKey.APP_PROMO: (True, 10),
    HomeModuleKey.FOOTER: (True, 20),
}

# Newer backends renamed some modules
MODULE_ALIASES: dict[HomeModuleKey, tuple[str, ...]] = {
    HomeModuleKey.EXPLORE_CATEGORIES: ("explore",),
    HomeModuleKey.TRENDING_STRIP: ("trending",),
}

# Admin shape: module visibility comes from ui.showX flags
UI_FLAGS: dict[HomeModuleKey, str] = {
    HomeModuleKey.EXPLORE_CATEGORIES: "showExploreCategories",
    HomeModuleKey.CATEGORY_STRIP: "showCategoryStrip",
    HomeModuleKey.TRENDING_STRIP: "showTrendingStrip",
    HomeModuleKey.LIVE_UPDATES_TICKER: "showLiveUpdatesTicker",
    HomeModuleKey.BREAKING_TICKER: "showBreakingTicker",
    HomeModuleKey.QUICK_TOOLS: "showQuickTools",
    HomeModuleKey.APP_PROMO: "showAppPromo",
    HomeModuleKey.FOOTER: "showFooter",
}

BREAKING_MODES = ("auto", "on", "off")


def default_public_settings() -> PublicSiteSettings:
    return PublicSiteSettings(
        modules={
            key.value: HomeModuleSettings(enabled=enabled, order=order)
            for key, (enabled, order) in DEFAULT_MODULES.items()
        },
    )


def _record(value: Any) -> Optional[dict]:
    return value if isinstance(value, dict) else None


def _number(value: Any) -> Optional[float]:
    """Finite number from an int, float or numeric string; None otherwise."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _tidy(number: float) -> int | float:
    return int(number) if float(number).is_integer() else number


def _breaking_mode(value: Any, fallback: str = "auto") -> str:
    mode = str(value or "").strip().lower()
    return mode if mode in BREAKING_MODES else fallback


def _language_theme(raw: Any) -> Optional[LanguageTheme]:
    raw = _record(raw)
    if raw is None:
        return None
    locale = Locale.from_code(raw.get("lang") or raw.get("language"))
    theme_id = raw.get("themeId") if isinstance(raw.get("themeId"), str) else None
    if locale is None and not theme_id:
        return None
    return LanguageTheme(lang=locale.value if locale else None, theme_id=theme_id)


def _module(raw: Any, base: HomeModuleSettings) -> HomeModuleSettings:
    """A module entry may be a bare bool or {enabled, order, url}."""
    if isinstance(raw, bool):
        return base.model_copy(update={"enabled": raw})
    raw = _record(raw)
    if raw is None:
        return base

    order = _number(raw.get("order"))
    return HomeModuleSettings(
        enabled=raw["enabled"] if isinstance(raw.get("enabled"), bool) else base.enabled,
        order=_tidy(order) if order is not None else base.order,
        url=raw["url"] if isinstance(raw.get("url"), str) else base.url,
    )


def _ticker(raw: Any, base: SiteTickerSettings) -> SiteTickerSettings:
    raw = _record(raw)
    if raw is None:
        return base

    speed = raw.get("speedSeconds", raw.get("speedSec"))
    show_when_empty = raw.get("showWhenEmpty", raw.get("showEmpty"))
    return SiteTickerSettings(
        enabled=raw["enabled"] if isinstance(raw.get("enabled"), bool) else base.enabled,
        speed_seconds=_tidy(clamp_speed(speed, base.speed_seconds)),
        show_when_empty=show_when_empty if isinstance(show_when_empty, bool) else base.show_when_empty,
    )


def _module_entry(modules: dict, key: HomeModuleKey) -> Any:
    if key.value in modules:
        return modules[key.value]
    for alias in MODULE_ALIASES.get(key, ()):
        if alias in modules:
            return modules[alias]
    return None


def _from_admin_shape(payload: dict, defaults: PublicSiteSettings) -> PublicSiteSettings:
    """{homeModules, ui, tickers}: ui flags drive visibility where homeModules is silent."""
    home_modules = _record(payload.get("homeModules")) or {}
    ui = _record(payload.get("ui")) or {}
    tickers = _record(payload.get("tickers")) or {}

    def ui_flag(name: Optional[str], fallback: bool) -> bool:
        value = ui.get(name) if name else None
        return value if isinstance(value, bool) else fallback

    modules: dict[str, HomeModuleSettings] = {}
    for key in HomeModuleKey:
        base = defaults.modules[key.value]
        raw = _record(home_modules.get(key.value))
        if raw is not None:
            order = next(
                (n for n in (_number(raw.get(k)) for k in ("order", "position", "orderPosition")) if n is not None),
                999,
            )
            modules[key.value] = HomeModuleSettings(
                enabled=raw.get("enabled") is not False,
                order=_tidy(order),
                url=raw["url"] if isinstance(raw.get("url"), str) else base.url,
            )
        else:
            modules[key.value] = base.model_copy(update={"enabled": ui_flag(UI_FLAGS.get(key), base.enabled)})

    breaking = _ticker(tickers.get("breaking"), defaults.tickers.breaking)
    live = _ticker(tickers.get("live"), defaults.tickers.live)
    # ticker visibility always comes from the ui flags in this shape
    breaking = breaking.model_copy(update={"enabled": ui_flag("showBreakingTicker", defaults.tickers.breaking.enabled)})
    live = live.model_copy(update={"enabled": ui_flag("showLiveUpdatesTicker", defaults.tickers.live.enabled)})

    return PublicSiteSettings(
        modules=modules,
        tickers=SiteTickers(breaking=breaking, live=live),
        breaking_mode=_breaking_mode(payload.get("breakingMode"), defaults.breaking_mode),
        footer_text=payload["footerText"] if isinstance(payload.get("footerText"), str) else defaults.footer_text,
        language_theme=_language_theme(payload.get("languageTheme")) or defaults.language_theme,
    )


def merge_public_settings_with_defaults(
    raw: Any,
    defaults: Optional[PublicSiteSettings] = None,
) -> PublicSiteSettings:
    """
    Normalize any published settings payload onto the defaults.

    >>> merge_public_settings_with_defaults({}) == default_public_settings()
    True
    """
    defaults = defaults or default_public_settings()
    root = _record(raw) or {}
    payload = _record(root.get("data")) or _record(root.get("settings")) or root

    if _record(payload.get("homeModules")) is not None or _record(payload.get("ui")) is not None:
        return _from_admin_shape(payload, defaults)

    published = _record(payload.get("published")) or {}
    homepage = _record(published.get("homepage")) or {}
    modules_raw = (
        _record(payload.get("modules"))
        or _record(published.get("modules"))
        or _record(homepage.get("modules"))
        or {}
    )
    tickers_raw = (
        _record(payload.get("tickers"))
        or _record(published.get("tickers"))
        or _record(homepage.get("tickers"))
        or {}
    )

    footer_text = next(
        (value for value in (payload.get("footerText"), published.get("footerText")) if isinstance(value, str)),
        defaults.footer_text,
    )

    return PublicSiteSettings(
        modules={
            key.value: _module(_module_entry(modules_raw, key), defaults.modules[key.value])
            for key in HomeModuleKey
        },
        tickers=SiteTickers(
            breaking=_ticker(tickers_raw.get("breaking"), defaults.tickers.breaking),
            live=_ticker(tickers_raw.get("live"), defaults.tickers.live),
        ),
        breaking_mode=_breaking_mode(
            payload.get("breakingMode", published.get("breakingMode")), defaults.breaking_mode
        ),
        footer_text=footer_text,
        language_theme=(
            _language_theme(payload.get("languageTheme"))
            or _language_theme(published.get("languageTheme"))
            or defaults.language_theme
        ),
    )


def merge_public_settings_response(raw: Any) -> PublicSiteSettingsResponse:
    """Settings plus the version and updatedAt stamps from the envelope."""
    root = _record(raw) or {}
    version = root.get("version")
    updated_at = root.get("updatedAt")
    return PublicSiteSettingsResponse(
        settings=merge_public_settings_with_defaults(root),
        version=str(version) if isinstance(version, (str, int)) and not isinstance(version, bool) else None,
        updated_at=updated_at if isinstance(updated_at, str) else None,
    )


def get_ordered_enabled_keys(modules: dict[str, HomeModuleSettings]) -> list[str]:
    """Enabled module keys sorted by order; ties keep their declared order."""
    ordered = sorted(modules, key=lambda key: modules[key].order)
    return [key for key in ordered if modules[key].enabled is not False]


def is_home_module_enabled(
    settings: Optional[PublicSiteSettings],
    key: HomeModuleKey | str,
    fallback: bool,
) -> bool:
    module = settings.modules.get(HomeModuleKey(key).value) if settings else None
    return module.enabled if module is not None else fallback


def get_home_module_order(
    settings: Optional[PublicSiteSettings],
    key: HomeModuleKey | str,
    fallback: float,
) -> float:
    module = settings.modules.get(HomeModuleKey(key).value) if settings else None
    return module.order if module is not None else fallback


def is_ticker_enabled(settings: Optional[PublicSiteSettings], ticker: str, fallback: bool) -> bool:
    if settings is None or ticker not in TICKER_NAMES:
        return fallback
    return getattr(settings.tickers, ticker).enabled


def get_ticker_speed_seconds(settings: Optional[PublicSiteSettings], ticker: str, fallback: float) -> float:
    if settings is None or ticker not in TICKER_NAMES:
        return fallback
    return clamp_speed(getattr(settings.tickers, ticker).speed_seconds, fallback)


def should_ticker_show_when_empty(settings: Optional[PublicSiteSettings], ticker: str, fallback: bool) -> bool:
    if settings is None or ticker not in TICKER_NAMES:
        return fallback
    return getattr(settings.tickers, ticker).show_when_empty


class PublicSiteSettingsService:
    """Published site settings behind a TTL cache; defaults when unavailable."""

    def __init__(self, client: BackendClient, cache: TTLCache[PublicSiteSettingsResponse]):
        self.client = client
        self.cache = cache

    async def get_settings(self) -> PublicSiteSettingsResponse:
        try:
            return await self.cache.get_or_load(self._load)
        except BackendNotConfiguredError:
            return PublicSiteSettingsResponse(settings=default_public_settings())
        except BackendUnavailableError:
            logger.warning("Site settings unavailable; using the default home layout")
            return PublicSiteSettingsResponse(settings=default_public_settings())

    async def _load(self) -> PublicSiteSettingsResponse:
        upstream = await self.client.get(
            "/api/site-settings/public",
            headers={"Cache-Control": "no-store", "Pragma": "no-cache"},
        )
        if not upstream.ok or not isinstance(upstream.data, dict):
            logger.warning(f"Site settings returned {upstream.status_code}; using defaults")
            return PublicSiteSettingsResponse(settings=default_public_settings())
        return merge_public_settings_response(upstream.data)
