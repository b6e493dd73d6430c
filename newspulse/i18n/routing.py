"""
Locale path canonicalization.

URL contract:
- English is unprefixed: /foo
- Hindi and Gujarati are prefixed: /hi/foo, /gu/foo
- /en/foo is accepted but redirected to /foo

canonicalize() is a pure function of (path, cookies). The middleware turns
its decision into a redirect, an internal rewrite or a pass-through.
"""
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional

from newspulse.i18n.locale import (
    Locale,
    LOCALE_COOKIE_PRIORITY,
    preferred_locale_from_cookies,
)

EXCLUDED_PREFIXES = (
    "/api",
    "/_next",
    "/public-api",
    "/admin-api",
    "/public/broadcast",
    "/public/ui-labels",
)

_FILE_EXTENSION_RE = re.compile(r"\.[A-Za-z0-9]+$")

# Browsers treat "//host" and "/\host" as another origin
_LEADING_SEPARATORS = "/\\"


class LocaleAction(str, Enum):
    """What the middleware should do with a request."""
    PASS = "pass"
    REDIRECT = "redirect"
    REWRITE = "rewrite"


@dataclass(frozen=True)
class LocaleDecision:
    """Result of canonicalizing a request path."""
    action: LocaleAction
    path: str
    locale: Optional[Locale] = None
    cookie_writes: dict[str, str] = field(default_factory=dict)
    request_path: str = "/"

    @property
    def visible_path(self) -> str:
        """Path the browser ends up showing after this decision."""
        if self.action == LocaleAction.REDIRECT:
            return self.path
        return self.request_path


def _cookie_writes(locale: Locale) -> dict[str, str]:
    return {name: locale.value for name in LOCALE_COOKIE_PRIORITY}


def is_excluded_path(path: str) -> bool:
    """Paths the locale router never touches (API, framework assets, files)."""
    if path.startswith(EXCLUDED_PREFIXES):
        return True
    return bool(_FILE_EXTENSION_RE.search(path))


def _split_leading_locales(path: str) -> tuple[list[Locale], str]:
    """
    Split consecutive leading locale segments off a path.

    "/gu/hi/foo" -> ([GUJARATI, HINDI], "/foo")
    Only the codes themselves count as segments, in any case.
    """
    segments = path.split("/")[1:]
    locales: list[Locale] = []
    index = 0
    while index < len(segments):
        segment = segments[index].lower()
        match = next((loc for loc in Locale if loc.value == segment), None)
        if match is None:
            break
        locales.append(match)
        index += 1

    rest = "/" + "/".join(segments[index:]).lstrip(_LEADING_SEPARATORS)
    return locales, rest


def _normalize(path: str) -> str:
    """Exactly one leading slash, so no result reads as a protocol-relative URL."""
    return "/" + str(path or "/").lstrip(_LEADING_SEPARATORS)


def strip_locale_prefix(path: str) -> str:
    """Strip ALL leading locale prefixes: /gu/hi/foo -> /foo."""
    _, rest = _split_leading_locales(_normalize(path))
    return rest


def get_locale_from_path(path: str) -> Optional[Locale]:
    """Locale of the first path segment, if it is one."""
    locales, _ = _split_leading_locales(_normalize(path))
    return locales[0] if locales else None


def build_path_with_locale(
    locale: Locale,
    path: str,
    search: str = "",
    fragment: str = "",
) -> str:
    """
    Build the canonical URL for a path in the given locale.

    >>> build_path_with_locale(Locale.HINDI, "/gu/sports", "page=2")
    '/hi/sports?page=2'
    """
    base = strip_locale_prefix(path)
    prefix = f"/{locale.value}" if locale.is_prefixed else ""

    out = (prefix or "/") if base == "/" else f"{prefix}{base}"
    if search:
        out += search if search.startswith("?") else f"?{search}"
    if fragment:
        out += fragment if fragment.startswith("#") else f"#{fragment}"
    return out


def split_path(as_path: str) -> tuple[str, str, str]:
    """Split "/a?b=1#c" into ("/a", "?b=1", "#c")."""
    raw = str(as_path or "/")
    before_hash, sep, after_hash = raw.partition("#")
    fragment = f"#{after_hash}" if sep else ""

    path, sep, query = before_hash.partition("?")
    search = f"?{query}" if sep else ""
    return path or "/", search, fragment


def canonicalize(path: str, cookies: Mapping[str, str]) -> LocaleDecision:
    """
    Decide how to route a request path given its locale cookies.

    - Excluded paths pass through untouched.
    - Stacked prefixes (/gu/hi/foo) redirect to the last locale (/hi/foo).
    - /en/foo redirects to /foo.
    - /hi/foo and /gu/foo rewrite internally to /foo.
    - Unprefixed paths redirect to the preferred cookie locale unless it is
      English (or absent), in which case they pass through.

    Every redirect or rewrite writes all three locale cookies.
    """
    path = _normalize(path)

    if is_excluded_path(path):
        return LocaleDecision(LocaleAction.PASS, path, request_path=path)

    locales, rest = _split_leading_locales(path)

    if len(locales) >= 2:
        canonical = locales[-1]
        return LocaleDecision(
            LocaleAction.REDIRECT,
            build_path_with_locale(canonical, rest),
            canonical,
            _cookie_writes(canonical),
            request_path=path,
        )

    if len(locales) == 1:
        locale = locales[0]
        action = LocaleAction.REWRITE if locale.is_prefixed else LocaleAction.REDIRECT
        return LocaleDecision(action, rest, locale, _cookie_writes(locale), request_path=path)

    preferred = preferred_locale_from_cookies(cookies)
    if preferred is not None and preferred.is_prefixed:
        return LocaleDecision(
            LocaleAction.REDIRECT,
            build_path_with_locale(preferred, path),
            preferred,
            request_path=path,
        )

    return LocaleDecision(LocaleAction.PASS, path, request_path=path)
