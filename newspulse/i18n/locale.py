"""
Locale definitions and localization utilities.

Provides:
- Locale enum with the supported site languages
- Locale cookie names shared by the middleware and the pages
- LocaleContext for request-scoped locale storage
- t() function for UI label lookup
"""

from enum import Enum
from typing import Optional, Any, Mapping
from functools import lru_cache
from pathlib import Path
from contextvars import ContextVar
import json
import logging

logger = logging.getLogger(__name__)

# Cookie names. All three are written with the same value.
LOCALE_COOKIE = "np_locale"
LEGACY_LOCALE_COOKIE = "np_lang"
FRAMEWORK_LOCALE_COOKIE = "NEXT_LOCALE"

# Read priority for the preferred locale
LOCALE_COOKIE_PRIORITY = (LOCALE_COOKIE, LEGACY_LOCALE_COOKIE, FRAMEWORK_LOCALE_COOKIE)

LOCALE_COOKIE_MAX_AGE = 31536000  # 1 year

# Context variable for request-scoped locale
_current_locale: ContextVar[Optional["Locale"]] = ContextVar(
    "current_locale", default=None
)


class Locale(str, Enum):
    """Supported site locales. English is the default and is unprefixed in URLs."""

    ENGLISH = "en"
    HINDI = "hi"
    GUJARATI = "gu"

    @classmethod
    def default(cls) -> "Locale":
        return cls.ENGLISH

    @classmethod
    def from_code(cls, code: Any) -> Optional["Locale"]:
        """
        Parse a locale from a cookie, query or header value.

        Handles:
        - Codes in any case: en, HI, Gu
        - Language names: english, hindi, gujarati

        Args:
            code: Raw value (may be None or non-string)

        Returns:
            Matching Locale, or None for anything unrecognized
        """
        if code is None:
            return None

        normalized = str(code).strip().lower()
        if not normalized:
            return None

        for locale in cls:
            if locale.value == normalized:
                return locale

        return _SYNONYMS.get(normalized)

    @property
    def is_prefixed(self) -> bool:
        """Whether URLs for this locale carry a /<code> prefix."""
        return self != Locale.ENGLISH

    @property
    def native_name(self) -> str:
        """Name in the language itself."""
        names = {
            Locale.ENGLISH: "English",
            Locale.HINDI: "हिन्दी",
            Locale.GUJARATI: "ગુજરાતી",
        }
        return names[self]


_SYNONYMS = {
    "english": Locale.ENGLISH,
    "hindi": Locale.HINDI,
    "gujarati": Locale.GUJARATI,
}


def preferred_locale_from_cookies(cookies: Mapping[str, str]) -> Optional[Locale]:
    """
    Return the first recognizable locale among the locale cookies.

    Cookies are consulted in priority order: np_locale, np_lang, NEXT_LOCALE.
    Unrecognized values are skipped.
    """
    for name in LOCALE_COOKIE_PRIORITY:
        locale = Locale.from_code(cookies.get(name))
        if locale is not None:
            return locale
    return None


class LocaleContext:
    """
    Context for the current request's locale.

    Uses Python's contextvars to maintain request-scoped state
    in async environments.
    """

    @classmethod
    def get(cls) -> Locale:
        """Get current locale for this request/context."""
        locale = _current_locale.get()
        return locale if locale is not None else Locale.ENGLISH

    @classmethod
    def set(cls, locale: Locale) -> None:
        """Set locale for this request/context."""
        _current_locale.set(locale)

    @classmethod
    def reset(cls) -> None:
        """Reset to default (English)."""
        _current_locale.set(None)


@lru_cache(maxsize=10)
def load_translations(locale: Locale) -> dict:
    """
    Load the UI label file for a locale.

    Args:
        locale: The locale to load labels for

    Returns:
        Dictionary of label keys to values
    """
    translations_dir = Path(__file__).parent / "translations"
    file_path = translations_dir / f"{locale.value}.json"

    if not file_path.exists():
        logger.warning(f"Translation file not found: {file_path}, falling back to English")
        file_path = translations_dir / "en.json"

    if not file_path.exists():
        logger.error("English translation file not found!")
        return {}

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in translation file {file_path}: {e}")
        return {}


def t(key: str, locale: Optional[Locale] = None, **kwargs: Any) -> str:
    """
    Get the UI label for the current locale.

    Supports:
    - Nested keys with dot notation: "category.sports"
    - String interpolation: t("category.empty", title="Sports")
    - Fallback to English if key not found in current locale
    - Fallback to key itself if not found anywhere

    Example:
        >>> t("category.empty", title="sports")
        "No sports news published yet."
    """
    locale = locale or LocaleContext.get()
    translations = load_translations(locale)

    value = get_nested(translations, key)

    if value is None and locale != Locale.ENGLISH:
        value = get_nested(load_translations(Locale.ENGLISH), key)

    if value is None:
        logger.warning(f"Translation not found for key: {key}")
        return key

    if kwargs:
        try:
            return value.format(**kwargs)
        except KeyError as e:
            logger.warning(f"Missing interpolation key {e} for translation: {key}")
            return value

    return value


def get_nested(data: dict, key: str) -> Optional[str]:
    """
    Get a string value from a nested dictionary using dot notation.

    Args:
        data: Dictionary to search
        key: Dot-separated key path (e.g., "nav.home")

    Returns:
        String value if found, None otherwise
    """
    parts = key.split(".")
    current = data

    for part in parts:
        if isinstance(current, dict) and part in current:
            current = current[part]
        else:
            return None

    return current if isinstance(current, str) else None
