"""
Public news proxy endpoints: listings, detail, category feeds, articles,
web stories, trending topics and UI labels.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

from newspulse.api.dependencies import (
    forward_headers,
    get_category_fetcher,
    get_news_service,
    get_request_locale,
)
from newspulse.application.category_news import CategoryNewsFetcher
from newspulse.application.news import NewsService
from newspulse.config import Settings, get_settings
from newspulse.domain.schemas import ArticleLookupResponse, CategoryNewsResponse
from newspulse.i18n.locale import Locale
from newspulse.infrastructure.backend_client import ProxyResult

router = APIRouter(tags=["news"])

PUBLIC_CACHE = "public, s-maxage=60, stale-while-revalidate=30"
NO_STORE = "no-store"


def _proxy_response(result: ProxyResult) -> JSONResponse:
    return JSONResponse(
        status_code=result.status_code,
        content=result.body,
        headers={"Cache-Control": PUBLIC_CACHE if result.cacheable else NO_STORE},
    )


def _locale_param(lang: Optional[str], fallback: Locale) -> Locale:
    return Locale.from_code(lang) or fallback


@router.get("/public/news", summary="List published news")
async def list_news(
    request: Request,
    news: NewsService = Depends(get_news_service),
) -> JSONResponse:
    """Query parameters (page, limit, lang, ...) are forwarded to the backend."""
    result = await news.list_news(dict(request.query_params), forward_headers(request))
    return _proxy_response(result)


@router.get("/public/news/{news_id}", summary="Get a news item")
async def get_news(
    news_id: str,
    request: Request,
    news: NewsService = Depends(get_news_service),
) -> JSONResponse:
    if not news_id.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="id is required")
    result = await news.get_news(news_id, dict(request.query_params), forward_headers(request))
    return _proxy_response(result)


@router.get(
    "/public/category-news",
    response_model=CategoryNewsResponse,
    response_model_by_alias=True,
    summary="Category feed",
    description="Fetch news for a category, trying each backend filtering convention.",
)
async def category_news(
    category: Optional[str] = Query(default=None),
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    lang: Optional[str] = Query(default=None),
    locale: Locale = Depends(get_request_locale),
    fetcher: CategoryNewsFetcher = Depends(get_category_fetcher),
    settings: Settings = Depends(get_settings),
) -> CategoryNewsResponse:
    if not category or not category.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="category is required")
    return await fetcher.fetch(
        category.strip().lower(),
        limit=limit or settings.category_news_limit,
        locale=_locale_param(lang, locale),
    )


@router.get("/articles/{slug}", summary="Look up an article by slug or id")
async def get_article(
    slug: str,
    news: NewsService = Depends(get_news_service),
) -> JSONResponse:
    lookup: ArticleLookupResponse = await news.find_article(slug)
    status_code = status.HTTP_200_OK if lookup.ok else status.HTTP_404_NOT_FOUND
    return JSONResponse(status_code=status_code, content=lookup.model_dump(by_alias=True))


@router.get("/public/stories", summary="List web stories")
async def list_stories(
    request: Request,
    news: NewsService = Depends(get_news_service),
) -> JSONResponse:
    stories = await news.list_stories(dict(request.query_params))
    return JSONResponse(content=stories, headers={"Cache-Control": NO_STORE})


@router.get("/public/stories/{story_id}", summary="Get a web story")
async def get_story(
    story_id: str,
    news: NewsService = Depends(get_news_service),
) -> JSONResponse:
    story = await news.get_story(story_id)
    return JSONResponse(content=story, headers={"Cache-Control": NO_STORE})


@router.get("/public/trending-topics", summary="Trending topics")
async def trending_topics(news: NewsService = Depends(get_news_service)) -> JSONResponse:
    topics = await news.trending_topics()
    return JSONResponse(content=topics, headers={"Cache-Control": NO_STORE})


@router.get("/public/ui-labels", summary="UI label overrides")
async def ui_labels(
    request: Request,
    lang: Optional[str] = Query(default=None),
    locale: Locale = Depends(get_request_locale),
    news: NewsService = Depends(get_news_service),
) -> JSONResponse:
    labels = await news.ui_labels(_locale_param(lang, locale), forward_headers(request))
    return JSONResponse(content=labels, headers={"Cache-Control": NO_STORE})
