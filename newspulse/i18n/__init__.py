"""
Internationalization (i18n) module for the News Pulse frontend.

This module provides:
- Locale enum, cookie names and request-scoped locale context
- Locale path canonicalization (redirect / rewrite / pass-through)
- UI label lookup
- Middleware for FastAPI
"""

from newspulse.i18n.locale import (
    Locale,
    LocaleContext,
    t,
    load_translations,
    preferred_locale_from_cookies,
)
from newspulse.i18n.routing import (
    LocaleAction,
    LocaleDecision,
    canonicalize,
    build_path_with_locale,
    strip_locale_prefix,
)
from newspulse.i18n.middleware import LocaleMiddleware

__all__ = [
    "Locale",
    "LocaleContext",
    "t",
    "load_translations",
    "preferred_locale_from_cookies",
    "LocaleAction",
    "LocaleDecision",
    "canonicalize",
    "build_path_with_locale",
    "strip_locale_prefix",
    "LocaleMiddleware",
]
