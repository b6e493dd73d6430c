"""
Core domain models for the News Pulse frontend.
Articles, stories and ads are owned by the backend; these models only name
the fields the frontend reads and keep everything else.
"""
from typing import Any, Optional
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field


class PublicMode(str, Enum):
    """Global site mode published by the backend."""
    NORMAL = "NORMAL"
    READONLY = "READONLY"
    LOCKDOWN = "LOCKDOWN"


class AdSlotName(str, Enum):
    """Ad slots rendered on the home page."""
    HOME_728X90 = "HOME_728x90"
    HOME_RIGHT_300X250 = "HOME_RIGHT_300x250"


class BroadcastMode(str, Enum):
    """How a ticker decides whether to render."""
    AUTO = "AUTO"
    FORCE_ON = "FORCE_ON"
    FORCE_OFF = "FORCE_OFF"


class BroadcastType(str, Enum):
    BREAKING = "breaking"
    LIVE = "live"


class HomeModuleKey(str, Enum):
    """Home page sections the published site settings can toggle and order."""
    EXPLORE_CATEGORIES = "exploreCategories"
    CATEGORY_STRIP = "categoryStrip"
    TRENDING_STRIP = "trendingStrip"
    LIVE_UPDATES_TICKER = "liveUpdatesTicker"
    BREAKING_TICKER = "breakingTicker"
    LIVE_TV_CARD = "liveTvCard"
    QUICK_TOOLS = "quickTools"
    SNAPSHOTS = "snapshots"
    APP_PROMO = "appPromo"
    FOOTER = "footer"


# Category key -> translation key is "category.<key>"
CATEGORY_KEYS = (
    "national",
    "international",
    "sports",
    "business",
    "lifestyle",
    "glamour",
    "science-technology",
    "regional",
    "viral-videos",
    "web-stories",
    "editorial",
    "youth-pulse",
    "breaking",
)


class Article(BaseModel):
    """A news article as served by the backend. Unknown fields are kept."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Optional[str] = Field(default=None, alias="_id")
    title: Optional[str] = None
    slug: Optional[str] = None
    summary: Optional[str] = None
    excerpt: Optional[str] = None
    content: Optional[str] = None
    image: Optional[str] = None
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    category: Any = None
    language: Optional[str] = None
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    published_at: Optional[str] = Field(default=None, alias="publishedAt")

    @property
    def display_image(self) -> Optional[str]:
        return self.image_url or self.image

    @property
    def teaser(self) -> str:
        return (self.summary or self.excerpt or "").strip()

    @property
    def link_key(self) -> Optional[str]:
        """Slug if present, else id; used to build /news/<key> links."""
        return self.slug or self.id


class PublicAd(BaseModel):
    """An ad creative for a slot."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Optional[str | int] = None
    mongo_id: Optional[str] = Field(default=None, alias="_id")
    title: Optional[str] = None
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    target_url: Optional[str] = Field(default=None, alias="targetUrl")
    is_clickable: Optional[bool] = Field(default=None, alias="isClickable")
    slot: Optional[str] = None
