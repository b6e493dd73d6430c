"""
Server-rendered pages: home, category feeds and article detail.
"""
import asyncio
import logging
from pathlib import Path
from typing import Any, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from newspulse.api.dependencies import (
    get_ad_service,
    get_ad_settings_service,
    get_broadcast_service,
    get_category_fetcher,
    get_news_service,
    get_request_locale,
    get_site_settings_service,
    get_ticker_poller,
)
from newspulse.application.ads import AdService, AdSettingsService, is_ad_slot_enabled
from newspulse.application.broadcast import BroadcastService
from newspulse.application.category_news import CategoryNewsFetcher
from newspulse.application.news import NewsService
from newspulse.application.site_settings import (
    PublicSiteSettingsService,
    get_ordered_enabled_keys,
    get_ticker_speed_seconds,
    is_home_module_enabled,
    is_ticker_enabled,
    should_ticker_show_when_empty,
)
from newspulse.application.ticker import TickerPoller
from newspulse.config import Settings, get_settings
from newspulse.domain.models import CATEGORY_KEYS, AdSlotName, Article, HomeModuleKey
from newspulse.i18n.locale import Locale, t
from newspulse.i18n.routing import build_path_with_locale

logger = logging.getLogger(__name__)

router = APIRouter(include_in_schema=False)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

HOME_ARTICLE_LIMIT = 20

# Modules the home page renders above the top stories, in published order
HOME_SECTIONS = (
    HomeModuleKey.CATEGORY_STRIP.value,
    HomeModuleKey.BREAKING_TICKER.value,
    HomeModuleKey.TRENDING_STRIP.value,
    HomeModuleKey.EXPLORE_CATEGORIES.value,
)


def language_switch_path(target: Locale, path: str) -> str:
    """
    Link that switches the site to `target` on the current page.

    English links keep an explicit /en prefix so the redirect rewrites the
    locale cookies; an unprefixed link would bounce back to the cookie locale.
    """
    localized = build_path_with_locale(target, path)
    if target.is_prefixed:
        return localized
    return "/en" if localized == "/" else f"/en{localized}"


def _page_context(request: Request, locale: Locale, **extra: Any) -> dict:
    path = request.url.path

    def translate(key: str, **kwargs: Any) -> str:
        return t(key, locale, **kwargs)

    def link(target: str) -> str:
        return build_path_with_locale(locale, target)

    context = {
        "request": request,
        "locale": locale,
        "t": translate,
        "link": link,
        "categories": CATEGORY_KEYS,
        "languages": [
            {"locale": option, "href": language_switch_path(option, path), "active": option == locale}
            for option in Locale
        ],
    }
    context.update(extra)
    return context


def _articles(items: list) -> list[Article]:
    return [Article.model_validate(item) for item in items if isinstance(item, dict)]


async def _ticker_texts(
    poller: Optional[TickerPoller],
    broadcast: BroadcastService,
    locale: Locale,
) -> list[str]:
    if poller is not None and poller.snapshot.updated_at is not None:
        return poller.snapshot.texts
    return await broadcast.breaking_texts(locale)


async def _no_topics() -> list:
    return []


def _topic_label(topic: Any) -> str:
    """Trending topics arrive as strings or {label|title|name} objects."""
    if isinstance(topic, str):
        return topic.strip()
    if isinstance(topic, dict):
        for key in ("label", "title", "name", "topic"):
            if isinstance(topic.get(key), str) and topic[key].strip():
                return topic[key].strip()
    return ""


def _not_found(request: Request, locale: Locale, message_key: str) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "not_found.html",
        _page_context(request, locale, message=t(message_key, locale)),
        status_code=404,
    )


@router.get("/", response_class=HTMLResponse)
async def home_page(
    request: Request,
    locale: Locale = Depends(get_request_locale),
    news: NewsService = Depends(get_news_service),
    broadcast: BroadcastService = Depends(get_broadcast_service),
    ad_settings: AdSettingsService = Depends(get_ad_settings_service),
    ads: AdService = Depends(get_ad_service),
    site_settings: PublicSiteSettingsService = Depends(get_site_settings_service),
    poller: Optional[TickerPoller] = Depends(get_ticker_poller),
):
    """
    Top stories plus the published home modules in their published order:
    category strip, breaking ticker, trending topics and explore grid.
    Enabled home ad slots and the footer render around them.
    """
    items, ticker, slot_settings, published = await asyncio.gather(
        news.list_articles(locale, limit=HOME_ARTICLE_LIMIT),
        _ticker_texts(poller, broadcast, locale),
        ad_settings.get_settings(),
        site_settings.get_settings(),
    )
    layout = published.settings

    sections = [key for key in get_ordered_enabled_keys(layout.modules) if key in HOME_SECTIONS]
    if not is_ticker_enabled(layout, "breaking", True):
        sections = [key for key in sections if key != HomeModuleKey.BREAKING_TICKER.value]
    if not ticker and not should_ticker_show_when_empty(layout, "breaking", True):
        sections = [key for key in sections if key != HomeModuleKey.BREAKING_TICKER.value]

    enabled_slots = [slot for slot in AdSlotName if is_ad_slot_enabled(slot_settings, slot)]
    trending_shown = HomeModuleKey.TRENDING_STRIP.value in sections
    slot_ads, trending = await asyncio.gather(
        asyncio.gather(*(ads.get_slot_ad(slot.value) for slot in enabled_slots)),
        news.trending_topics() if trending_shown else _no_topics(),
    )
    home_ads = {slot.value: result.ad for slot, result in zip(enabled_slots, slot_ads) if result.ad}

    return templates.TemplateResponse(
        request,
        "home.html",
        _page_context(
            request,
            locale,
            articles=_articles(items),
            sections=sections,
            ticker_texts=ticker,
            ticker_speed=get_ticker_speed_seconds(layout, "breaking", 18),
            trending=[_topic_label(topic) for topic in trending if _topic_label(topic)],
            enabled_slots=[slot.value for slot in enabled_slots],
            ads=home_ads,
            show_footer=is_home_module_enabled(layout, HomeModuleKey.FOOTER, True),
            footer_text=layout.footer_text,
        ),
    )


@router.get("/news/{slug}", response_class=HTMLResponse)
async def article_page(
    slug: str,
    request: Request,
    locale: Locale = Depends(get_request_locale),
    news: NewsService = Depends(get_news_service),
):
    lookup = await news.find_article(slug)
    if not lookup.ok or lookup.article is None:
        logger.info(f"Article page miss for '{slug}': {lookup.error}")
        return _not_found(request, locale, "article.not_found")

    return templates.TemplateResponse(
        request,
        "article.html",
        _page_context(request, locale, article=Article.model_validate(lookup.article)),
    )


@router.get("/{category}", response_class=HTMLResponse)
async def category_page(
    category: str,
    request: Request,
    locale: Locale = Depends(get_request_locale),
    fetcher: CategoryNewsFetcher = Depends(get_category_fetcher),
    settings: Settings = Depends(get_settings),
):
    key = category.lower()
    if key not in CATEGORY_KEYS:
        return _not_found(request, locale, "page.not_found")

    result = await fetcher.fetch(key, limit=settings.category_news_limit, locale=locale)
    title = t(f"category.{key}", locale)
    return templates.TemplateResponse(
        request,
        "category.html",
        _page_context(
            request,
            locale,
            category_key=key,
            title=title,
            articles=_articles(result.items),
            error=t("category.error", locale) if result.error else None,
        ),
    )
