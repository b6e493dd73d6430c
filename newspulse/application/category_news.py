"""
Category news fetch and match.

The backend has shipped several query conventions for filtering by category
over time, and some deployments silently ignore the parameter and return the
unfiltered feed. CategoryNewsFetcher tries each convention, scores how many
returned items actually look like the requested category, and keeps the best.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Optional
from urllib.parse import quote

from newspulse.domain.schemas import CategoryNewsMeta, CategoryNewsResponse
from newspulse.i18n.locale import Locale
from newspulse.infrastructure.backend_client import (
    BackendClient,
    BackendNotConfiguredError,
    BackendUnavailableError,
)
from newspulse.infrastructure.payloads import ARTICLE_LIST_KEYS, error_message, extract_first

logger = logging.getLogger(__name__)

# Stop trying further conventions once a candidate scores at least this
EARLY_STOP_SCORE = 0.55

NEWS_SEARCH_PATH = "/api/news"

# Query-parameter conventions, tried in order. None means path-style.
CANDIDATE_PARAMS = ("category", "cat", "section", "categoryKey", None)

CATEGORY_KEYWORDS: dict[str, list[str]] = {
    "national": ["national", "india", "nation", "delhi", "parliament", "देश", "राष्ट्रीय", "રાષ્ટ્રીય"],
    "international": ["international", "world", "global", "foreign", "abroad", "विदेश", "अंतरराष्ट्रीय", "આંતરરાષ્ટ્રીય"],
    "sports": ["sport", "sports", "cricket", "football", "hockey", "tennis", "olympic", "ipl", "खेल", "રમત"],
    "business": ["business", "economy", "market", "finance", "stock", "sensex", "nifty", "trade", "व्यापार", "વેપાર"],
    "lifestyle": ["lifestyle", "health", "food", "travel", "fashion", "wellness", "जीवनशैली", "જીવનશૈલી"],
    "glamour": ["glamour", "glamorous", "entertainment", "bollywood", "film", "movie", "celebrity", "cinema", "मनोरंजन", "મનોરંજન"],
    "science-technology": ["science", "technology", "tech", "gadget", "space", "isro", "research", "विज्ञान", "વિજ્ઞાન"],
    "regional": ["regional", "gujarat", "ahmedabad", "surat", "vadodara", "rajkot", "local", "गुजरात", "ગુજરાત"],
    "viral-videos": ["viral", "video", "videos", "वायरल", "વાયરલ"],
    "web-stories": ["web story", "web stories", "webstory", "webstories"],
    "editorial": ["editorial", "opinion", "column", "संपादकीय", "તંત્રીલેખ"],
    "youth-pulse": ["youth", "campus", "student", "career", "exam", "युवा", "યુવા"],
    "breaking": ["breaking", "live", "urgent", "ब्रेकिंग", "બ્રેકિંગ"],
}

STRUCTURED_FIELDS = ("category", "categoryKey", "categorySlug", "section", "categories", "tags")
FREE_TEXT_FIELDS = ("title", "summary", "excerpt")
_TOKEN_OBJECT_KEYS = ("key", "slug", "name", "title")


def normalize_token(value: Any) -> str:
    """Lowercase, map - and _ to spaces, collapse whitespace."""
    text = str(value or "").lower().replace("-", " ").replace("_", " ")
    return re.sub(r"\s+", " ", text).strip()


def keywords_for(category_key: str) -> list[str]:
    """Keyword list for a category; unknown keys match on their own name."""
    key = category_key.strip().lower()
    if key in CATEGORY_KEYWORDS:
        return [normalize_token(k) for k in CATEGORY_KEYWORDS[key]]
    return [normalize_token(key)]


def _structured_tokens(item: dict) -> list[str]:
    tokens = []
    for field_name in STRUCTURED_FIELDS:
        value = item.get(field_name)
        values = value if isinstance(value, list) else [value]
        for v in values:
            if isinstance(v, dict):
                v = next((v[k] for k in _TOKEN_OBJECT_KEYS if v.get(k)), None)
            if isinstance(v, str) and field_name == "tags" and re.search(r"[;,|]", v):
                tokens.extend(normalize_token(t) for t in re.split(r"[;,|]", v))
                continue
            token = normalize_token(v) if isinstance(v, (str, int)) else ""
            if token:
                tokens.append(token)
    return [t for t in tokens if t]


def _contains_keyword(text: str, keyword: str) -> bool:
    if keyword.isascii():
        return re.search(rf"\b{re.escape(keyword)}\b", text) is not None
    return keyword in text


def item_matches_category(item: Any, category_key: str) -> bool:
    """
    Whether an article looks like it belongs to the category.

    Items with category/tag information are judged on it alone; the free-text
    check over title/summary/excerpt applies only to items without any.
    """
    if not isinstance(item, dict):
        return False

    key = normalize_token(category_key)
    keywords = keywords_for(category_key)

    tokens = _structured_tokens(item)
    if tokens:
        return any(
            token == key or any(_contains_keyword(token, kw) for kw in keywords)
            for token in tokens
        )

    text = normalize_token(" ".join(str(item.get(f) or "") for f in FREE_TEXT_FIELDS))
    if not text:
        return False
    return any(_contains_keyword(text, kw) for kw in keywords)


def score_items(items: list, category_key: str) -> float:
    """Fraction of items matching the category (0.0 for an empty list)."""
    if not items:
        return 0.0
    matched = sum(1 for item in items if item_matches_category(item, category_key))
    return matched / len(items)


@dataclass
class _Candidate:
    endpoint: str
    items: list
    meta: CategoryNewsMeta
    score: float
    matching: list = field(default_factory=list)


class CategoryNewsFetcher:
    """
    Fetch a category feed from the backend, trying several conventions.

    Best-effort: deterministic for fixed backend responses, not an
    authoritative filter.
    """

    def __init__(self, client: BackendClient):
        self.client = client

    def _candidate_requests(
        self,
        category_key: str,
        limit: int,
        locale: Optional[Locale],
    ) -> list[tuple[str, dict]]:
        base_params: dict[str, Any] = {"limit": limit}
        if locale is not None:
            base_params["lang"] = locale.value

        requests = []
        for param in CANDIDATE_PARAMS:
            if param is None:
                path = f"{NEWS_SEARCH_PATH}/category/{quote(category_key, safe='')}"
                requests.append((path, dict(base_params)))
            else:
                requests.append((NEWS_SEARCH_PATH, {param: category_key, **base_params}))
        return requests

    async def fetch(
        self,
        category_key: str,
        limit: int = 30,
        locale: Optional[Locale] = None,
    ) -> CategoryNewsResponse:
        """
        Fetch and match news for a category.

        Args:
            category_key: Category key such as "sports" or "science-technology"
            limit: Max items requested from the backend
            locale: Optional content language

        Returns:
            CategoryNewsResponse with the best candidate's matching items, or
            an empty result with the last error when every candidate failed
        """
        best: Optional[_Candidate] = None
        first_success: Optional[_Candidate] = None
        last_error = "Fetch failed"
        last_status: Optional[int] = None
        last_endpoint = ""

        for path, params in self._candidate_requests(category_key, limit, locale):
            last_endpoint = self._describe(path, params)
            try:
                upstream = await self.client.get(path, params=params)
            except BackendNotConfiguredError:
                logger.warning("Backend not configured; category feed is empty")
                last_error, last_status = "Fetch failed", None
                break
            except BackendUnavailableError:
                last_error, last_status = "Fetch failed", None
                continue

            last_endpoint = upstream.url or last_endpoint
            if not upstream.ok:
                msg = error_message(upstream.data)
                last_error = f"API {upstream.status_code} ({msg})" if msg else f"API {upstream.status_code}"
                last_status = upstream.status_code
                continue
            if upstream.data is None:
                last_error, last_status = "Invalid JSON from backend", upstream.status_code
                continue

            items = extract_first(upstream.data, ARTICLE_LIST_KEYS)
            candidate = _Candidate(
                endpoint=last_endpoint,
                items=items,
                meta=self._meta(upstream.data, limit),
                score=score_items(items, category_key),
            )
            candidate.matching = [i for i in items if item_matches_category(i, category_key)]
            logger.debug(f"Category '{category_key}' candidate {last_endpoint} scored {candidate.score:.2f}")

            if first_success is None:
                first_success = candidate
            if best is None or candidate.score > best.score:
                best = candidate
            if candidate.score >= EARLY_STOP_SCORE:
                break

        if best is None:
            return CategoryNewsResponse(
                items=[],
                meta=CategoryNewsMeta(limit=limit),
                endpoint=last_endpoint,
                error=last_error,
                status=last_status,
            )

        if best.score > 0:
            return CategoryNewsResponse(
                items=best.matching,
                meta=best.meta,
                endpoint=best.endpoint,
                score=best.score,
            )

        # Nothing recognizably matched anywhere; show the feed as served.
        return CategoryNewsResponse(
            items=first_success.items,
            meta=first_success.meta,
            endpoint=first_success.endpoint,
            score=0.0,
        )

    def _describe(self, path: str, params: dict) -> str:
        query = "&".join(f"{k}={quote(str(v), safe='')}" for k, v in params.items())
        return f"{self.client.url(path)}?{query}"

    @staticmethod
    def _meta(data: Any, limit: int) -> CategoryNewsMeta:
        if not isinstance(data, dict):
            return CategoryNewsMeta(limit=limit)

        def as_int(value: Any) -> Optional[int]:
            return value if isinstance(value, int) and not isinstance(value, bool) else None

        return CategoryNewsMeta(
            total=as_int(data.get("total")),
            page=as_int(data.get("page")),
            total_pages=as_int(data.get("totalPages")),
            limit=limit,
        )
