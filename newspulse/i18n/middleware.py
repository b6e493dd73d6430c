"""
FastAPI middleware for locale routing and context setup.

Canonicalizes locale-prefixed paths, persists the locale in cookies and sets
LocaleContext for the duration of the request.
"""
import logging

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import RedirectResponse, Response

from newspulse.i18n.locale import (
    Locale,
    LocaleContext,
    LOCALE_COOKIE_MAX_AGE,
    preferred_locale_from_cookies,
)
from newspulse.i18n.routing import LocaleAction, LocaleDecision, canonicalize

logger = logging.getLogger(__name__)


class LocaleMiddleware(BaseHTTPMiddleware):
    """
    Middleware to route locale-prefixed URLs.

    Per request, the path and locale cookies go through canonicalize():
    1. REDIRECT: respond 307 to the canonical path (query string kept)
    2. REWRITE: route the request to the unprefixed path, URL unchanged
    3. PASS: route as-is

    The resolved locale is stored in:
    - LocaleContext (async-safe context variable)
    - request.state.locale (for direct access in endpoints)
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        decision = canonicalize(request.url.path, request.cookies)
        locale = self._resolve_locale(request, decision)

        if decision.action == LocaleAction.REDIRECT:
            target = decision.path
            if request.url.query:
                target = f"{target}?{request.url.query}"
            logger.debug(f"Locale redirect {request.url.path} -> {target}")
            response: Response = RedirectResponse(url=target, status_code=307)
            self._write_cookies(response, decision)
            return response

        if decision.action == LocaleAction.REWRITE:
            request.scope["path"] = decision.path
            request.scope["raw_path"] = decision.path.encode("utf-8")

        LocaleContext.set(locale)
        request.state.locale = locale

        try:
            response = await call_next(request)
            self._write_cookies(response, decision)
            response.headers["Content-Language"] = locale.value
            return response
        finally:
            LocaleContext.reset()

    def _resolve_locale(self, request: Request, decision: LocaleDecision) -> Locale:
        """
        Locale for the request: the routed locale, else the preferred
        cookie locale, else English.
        """
        if decision.locale is not None:
            return decision.locale
        return preferred_locale_from_cookies(request.cookies) or Locale.default()

    def _write_cookies(self, response: Response, decision: LocaleDecision) -> None:
        for name, value in decision.cookie_writes.items():
            response.set_cookie(
                name,
                value,
                max_age=LOCALE_COOKIE_MAX_AGE,
                path="/",
                samesite="lax",
            )
