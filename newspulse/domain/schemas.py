"""
Response schemas for the proxy endpoints.
These define the canonical shapes returned to the browser, whatever envelope
the backend used. Field names are serialized in camelCase.
"""
from typing import Any, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from newspulse.domain.models import BroadcastMode, PublicMode


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(BaseModel):
    """Error body used by proxy endpoints."""
    ok: bool = False
    message: str


# News

class NewsListResponse(CamelModel):
    """Default body for the news listing when the backend is unavailable."""
    items: list[dict[str, Any]] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    total_pages: int = 1
    limit: int = 0


class CategoryNewsMeta(CamelModel):
    total: Optional[int] = None
    page: Optional[int] = None
    total_pages: Optional[int] = None
    limit: Optional[int] = None


class CategoryNewsResponse(CamelModel):
    """Result of the category fetch-and-match helper."""
    items: list[dict[str, Any]] = Field(default_factory=list)
    meta: CategoryNewsMeta = Field(default_factory=CategoryNewsMeta)
    endpoint: str = ""
    score: float = 0.0
    error: Optional[str] = None
    status: Optional[int] = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "items": [{"_id": "a1", "title": "India win the series", "category": "sports"}],
                "meta": {"total": 1, "page": 1, "totalPages": 1, "limit": 30},
                "endpoint": "https://backend.example/api/news?cat=sports&limit=30",
                "score": 1.0,
                "error": None,
                "status": None,
            }
        },
    )


class ArticleLookupResponse(CamelModel):
    ok: bool
    article: Optional[dict[str, Any]] = None
    endpoint_tried: list[str] = Field(default_factory=list)
    error: Optional[str] = None


# Ads

class AdSlotSettings(BaseModel):
    """Per-slot enable flags. Missing means enabled."""
    HOME_728x90: bool = True
    HOME_RIGHT_300x250: bool = True


class AdSettingsResponse(CamelModel):
    ok: bool = True
    slot_enabled: AdSlotSettings = Field(default_factory=AdSlotSettings)


class AdSlotResponse(BaseModel):
    ok: bool
    ad: Optional[dict[str, Any]] = None


# Settings

class PublicModeResponse(CamelModel):
    ok: bool = True
    mode: PublicMode = PublicMode.NORMAL
    read_only: bool = False
    external_fetch: bool = True
    message: Optional[str] = None


class CommunitySettingsResponse(CamelModel):
    community_reporter_closed: bool = False
    reporter_portal_closed: bool = False
    updated_at: Optional[str] = None


class UiLabelsResponse(BaseModel):
    ok: bool = True
    labels: dict[str, Any] = Field(default_factory=dict)


# Public site settings

class HomeModuleSettings(BaseModel):
    """Visibility and position of one home page module."""
    enabled: bool = True
    order: Union[int, float] = 0
    url: Optional[str] = None


class SiteTickerSettings(CamelModel):
    enabled: bool = True
    speed_seconds: Union[int, float] = 18
    show_when_empty: bool = True


class SiteTickers(BaseModel):
    breaking: SiteTickerSettings = Field(default_factory=lambda: SiteTickerSettings(speed_seconds=18))
    live: SiteTickerSettings = Field(default_factory=lambda: SiteTickerSettings(speed_seconds=24))


class LanguageTheme(CamelModel):
    lang: Optional[str] = None
    theme_id: Optional[str] = None


class PublicSiteSettings(CamelModel):
    """Published home page layout and ticker preferences."""
    modules: dict[str, HomeModuleSettings] = Field(default_factory=dict)
    tickers: SiteTickers = Field(default_factory=SiteTickers)
    breaking_mode: Literal["auto", "on", "off"] = "auto"
    footer_text: Optional[str] = None
    language_theme: Optional[LanguageTheme] = None


class PublicSiteSettingsResponse(CamelModel):
    ok: bool = True
    settings: PublicSiteSettings = Field(default_factory=PublicSiteSettings)
    version: Optional[str] = None
    updated_at: Optional[str] = None


# Broadcast

class BroadcastTickerSettings(CamelModel):
    enabled: bool = True
    mode: BroadcastMode = BroadcastMode.AUTO
    speed_sec: float = 18


class BroadcastSettings(BaseModel):
    breaking: BroadcastTickerSettings = Field(
        default_factory=lambda: BroadcastTickerSettings(speed_sec=18)
    )
    live: BroadcastTickerSettings = Field(
        default_factory=lambda: BroadcastTickerSettings(speed_sec=24)
    )


class BroadcastItems(BaseModel):
    breaking: list[dict[str, Any]] = Field(default_factory=list)
    live: list[dict[str, Any]] = Field(default_factory=list)


class BroadcastMeta(CamelModel):
    has_settings: bool = False


class PublicBroadcastResponse(BaseModel):
    ok: bool = True
    meta: BroadcastMeta = Field(default_factory=BroadcastMeta)
    settings: BroadcastSettings = Field(default_factory=BroadcastSettings)
    items: BroadcastItems = Field(default_factory=BroadcastItems)


# Community reporter

class MyStoriesResponse(BaseModel):
    ok: bool = True
    stories: list[dict[str, Any]] = Field(default_factory=list)
