"""
Read-side news services: article listings, article detail, web stories,
trending topics and UI labels.

All reads fail open: any backend problem yields an empty/default payload.
"""
import logging
from typing import Any, Mapping, Optional
from urllib.parse import quote

from newspulse.domain.schemas import ArticleLookupResponse, NewsListResponse
from newspulse.i18n.locale import Locale
from newspulse.infrastructure.backend_client import (
    BackendClient,
    BackendUnavailableError,
    ProxyResult,
)
from newspulse.infrastructure.payloads import (
    ARTICLE_KEYS,
    ARTICLE_LIST_KEYS,
    LABEL_KEYS,
    STORY_KEYS,
    STORY_LIST_KEYS,
    TOPIC_LIST_KEYS,
    error_message,
    extract_first,
)

logger = logging.getLogger(__name__)


def unwrap_article(payload: Any) -> Optional[dict]:
    """Article object from {article: {...}}, {data: {...}} or a bare article."""
    article = extract_first(payload, ARTICLE_KEYS, kind="object")
    if article is not None:
        return article
    if isinstance(payload, dict) and payload.get("_id"):
        return payload
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _dicts(values: Any) -> list[dict]:
    return [value for value in values if isinstance(value, dict)] if isinstance(values, list) else []


def normalize_news_list(payload: Any, params: Optional[Mapping[str, Any]] = None) -> NewsListResponse:
    """
    Canonical listing body for any backend envelope.

    Paging fields are read from the root or from a meta/pagination object,
    then from the request parameters, and otherwise describe a single page
    holding every item.
    """
    items = _dicts(extract_first(payload, ARTICLE_LIST_KEYS))

    paging: dict = {}
    if isinstance(payload, dict):
        for key in ("meta", "pagination"):
            if isinstance(payload.get(key), dict):
                paging.update(payload[key])
        paging.update({k: v for k, v in payload.items() if k in ("total", "page", "totalPages", "limit")})

    requested_limit = _as_int((params or {}).get("limit"))
    limit = _as_int(paging.get("limit"))
    if limit is None:
        limit = requested_limit if requested_limit is not None else len(items)

    total = _as_int(paging.get("total"))
    return NewsListResponse(
        items=items,
        total=total if total is not None else len(items),
        page=_as_int(paging.get("page")) or _as_int((params or {}).get("page")) or 1,
        total_pages=_as_int(paging.get("totalPages")) or 1,
        limit=limit,
    )


class NewsService:
    """Backend reads for news, stories and labels."""

    def __init__(
        self,
        client: BackendClient,
        stories_timeout_seconds: Optional[float] = None,
    ):
        self.client = client
        self.stories_timeout_seconds = stories_timeout_seconds

    async def list_news(
        self,
        params: Mapping[str, Any],
        forward_headers: Optional[Mapping[str, str]] = None,
    ) -> ProxyResult:
        """
        Proxy the public news listing; query parameters are forwarded as-is.

        The body is always a NewsListResponse, empty when the backend fails.
        """
        empty = ProxyResult(200, NewsListResponse().model_dump(by_alias=True))
        if not self.client.configured:
            return empty

        try:
            upstream = await self.client.get("/api/public/news", params=params, headers=forward_headers)
        except BackendUnavailableError:
            return empty

        if not upstream.ok or upstream.data is None:
            return empty

        listing = normalize_news_list(upstream.data, params)
        return ProxyResult(200, listing.model_dump(by_alias=True), cacheable=True)

    async def list_articles(
        self,
        locale: Optional[Locale] = None,
        limit: int = 30,
    ) -> list[dict]:
        """Latest published articles for server-rendered pages."""
        params: dict[str, Any] = {"limit": limit}
        if locale is not None:
            params["lang"] = locale.value
        result = await self.list_news(params)
        return result.body["items"]

    async def get_news(
        self,
        news_id: str,
        params: Optional[Mapping[str, Any]] = None,
        forward_headers: Optional[Mapping[str, str]] = None,
    ) -> ProxyResult:
        """Single public news item; an upstream 404 is passed through."""
        if not self.client.configured:
            return ProxyResult(200, {})

        path = f"/api/public/news/{quote(news_id, safe='')}"
        try:
            upstream = await self.client.get(path, params=params, headers=forward_headers)
        except BackendUnavailableError:
            return ProxyResult(200, {})

        if upstream.status_code == 404:
            return ProxyResult(404, {"ok": False, "message": "NOT_FOUND"})
        if not upstream.ok or upstream.data is None:
            return ProxyResult(200, {})
        return ProxyResult(200, upstream.data, cacheable=True)

    async def find_article(self, slug_or_id: str) -> ArticleLookupResponse:
        """
        Look up an article by slug or id across the backend's historical routes.

        A 404 moves on to the next route; any other failure stops the search.
        """
        key = quote(slug_or_id, safe="")
        paths = [
            f"/api/articles/{key}",
            f"/api/news/{key}",
            f"/api/news/by-slug/{key}",
        ]
        tried: list[str] = []

        for path in paths:
            tried.append(self.client.url(path))
            try:
                upstream = await self.client.get(path)
            except BackendUnavailableError:
                return ArticleLookupResponse(ok=False, endpoint_tried=tried, error="Fetch failed")

            if upstream.status_code == 404:
                continue
            if not upstream.ok:
                msg = error_message(upstream.data)
                error = f"API {upstream.status_code} ({msg})" if msg else f"API {upstream.status_code}"
                return ArticleLookupResponse(ok=False, endpoint_tried=tried, error=error)

            article = unwrap_article(upstream.data)
            if not article or not article.get("_id"):
                return ArticleLookupResponse(ok=False, endpoint_tried=tried, error="Article not found")
            return ArticleLookupResponse(ok=True, article=article, endpoint_tried=tried)

        return ArticleLookupResponse(ok=False, endpoint_tried=tried, error="Article not found")

    async def list_stories(self, params: Mapping[str, Any]) -> list:
        """Web stories listing; slow upstreams time out to an empty list."""
        if not self.client.configured:
            return []
        try:
            upstream = await self.client.get(
                "/api/public/stories",
                params=params,
                timeout_seconds=self.stories_timeout_seconds,
            )
        except BackendUnavailableError:
            return []
        if not upstream.ok or upstream.data is None:
            return []
        return _dicts(extract_first(upstream.data, STORY_LIST_KEYS + ("data",)))

    async def get_story(self, story_id: str) -> dict:
        if not self.client.configured:
            return {"story": None}
        try:
            upstream = await self.client.get(f"/api/public/stories/{quote(story_id, safe='')}")
        except BackendUnavailableError:
            return {"story": None}
        if not upstream.ok or upstream.data is None:
            return {"story": None}
        story = extract_first(upstream.data, STORY_KEYS, kind="object")
        if story is None and isinstance(upstream.data, dict) and "story" not in upstream.data:
            story = upstream.data or None
        return {"story": story}

    async def trending_topics(self) -> list:
        if not self.client.configured:
            return []
        try:
            upstream = await self.client.get("/api/public/trending-topics")
        except BackendUnavailableError:
            return []
        if not upstream.ok or upstream.data is None:
            return []
        return [
            topic for topic in extract_first(upstream.data, TOPIC_LIST_KEYS)
            if isinstance(topic, (dict, str))
        ]

    async def ui_labels(
        self,
        locale: Optional[Locale],
        forward_headers: Optional[Mapping[str, str]] = None,
    ) -> dict:
        """Backend-managed UI label overrides for a locale, as {ok, labels}."""
        default = {"ok": True, "labels": {}}
        if not self.client.configured:
            return default

        params = {"lang": locale.value} if locale is not None else None
        try:
            upstream = await self.client.get(
                "/api/public/ui-labels", params=params, headers=forward_headers
            )
        except BackendUnavailableError:
            return default
        if not upstream.ok or upstream.data is None:
            return default
        labels = extract_first(upstream.data, LABEL_KEYS, kind="object")
        if labels is None and isinstance(upstream.data, dict) and "labels" not in upstream.data:
            # bare {key: text} map
            labels = {k: v for k, v in upstream.data.items() if isinstance(v, str)}
        return {"ok": True, "labels": labels or {}}
