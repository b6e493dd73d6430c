"""
Tests for locale path canonicalization.
"""
import itertools

import pytest

from newspulse.i18n.locale import Locale
from newspulse.i18n.routing import (
    LocaleAction,
    build_path_with_locale,
    canonicalize,
    get_locale_from_path,
    is_excluded_path,
    split_path,
    strip_locale_prefix,
)

ALL_COOKIES = ("np_locale", "np_lang", "NEXT_LOCALE")


def cookies_set_to(value):
    return {name: value for name in ALL_COOKIES}


class TestCanonicalize:
    """Routing decisions for single requests."""

    def test_stacked_prefixes_redirect_to_last_locale(self):
        decision = canonicalize("/gu/hi/news", {})

        assert decision.action == LocaleAction.REDIRECT
        assert decision.path == "/hi/news"
        assert decision.locale == Locale.HINDI
        assert decision.cookie_writes == cookies_set_to("hi")

    def test_stacked_prefixes_ending_in_english_drop_prefix(self):
        decision = canonicalize("/hi/en/news", {})

        assert decision.action == LocaleAction.REDIRECT
        assert decision.path == "/news"
        assert decision.cookie_writes == cookies_set_to("en")

    def test_english_prefix_redirects_to_unprefixed(self):
        decision = canonicalize("/en/about", {})

        assert decision.action == LocaleAction.REDIRECT
        assert decision.path == "/about"
        assert decision.cookie_writes == cookies_set_to("en")

    def test_bare_english_prefix_redirects_to_root(self):
        decision = canonicalize("/en", {})

        assert decision.action == LocaleAction.REDIRECT
        assert decision.path == "/"

    @pytest.mark.parametrize("path", [
        "/en//evil.example/phish",
        "/hi/en//evil.example/phish",
        "/EN///evil.example/phish",
        "/en/\\evil.example/phish",
        "/gu/hi//evil.example/phish",
    ])
    def test_redirect_never_leaves_the_site(self, path):
        decision = canonicalize(path, {})

        assert decision.action == LocaleAction.REDIRECT
        assert decision.path.startswith("/")
        assert not decision.path.startswith(("//", "/\\"))
        assert decision.path.endswith("/evil.example/phish")

    def test_double_slash_english_redirect_target(self):
        assert canonicalize("/en//evil.example/phish", {}).path == "/evil.example/phish"

    def test_cookie_redirect_of_double_slash_path_stays_local(self):
        decision = canonicalize("//evil.example/phish", {"np_locale": "hi"})

        assert decision.action == LocaleAction.REDIRECT
        assert decision.path == "/hi/evil.example/phish"

    def test_cookie_locale_redirects_unprefixed_path(self):
        decision = canonicalize("/news", {"np_locale": "gu"})

        assert decision.action == LocaleAction.REDIRECT
        assert decision.path == "/gu/news"
        assert decision.cookie_writes == {}

    def test_legacy_cookie_synonym_is_recognized(self):
        decision = canonicalize("/news", {"np_lang": "hindi"})

        assert decision.action == LocaleAction.REDIRECT
        assert decision.path == "/hi/news"

    def test_cookie_priority_order(self):
        decision = canonicalize("/news", {"np_locale": "en", "np_lang": "gu", "NEXT_LOCALE": "hi"})

        assert decision.action == LocaleAction.PASS
        assert decision.cookie_writes == {}

    def test_unrecognized_cookie_falls_through_to_next(self):
        decision = canonicalize("/news", {"np_locale": "fr", "NEXT_LOCALE": "gu"})

        assert decision.path == "/gu/news"

    def test_prefixed_locale_rewrites(self):
        decision = canonicalize("/hi/news", {})

        assert decision.action == LocaleAction.REWRITE
        assert decision.path == "/news"
        assert decision.visible_path == "/hi/news"
        assert decision.cookie_writes == cookies_set_to("hi")

    def test_locale_segments_are_case_insensitive(self):
        decision = canonicalize("/GU/sports", {})

        assert decision.action == LocaleAction.REWRITE
        assert decision.locale == Locale.GUJARATI
        assert decision.path == "/sports"

    def test_language_names_are_not_path_segments(self):
        decision = canonicalize("/hindi/news", {})

        assert decision.action == LocaleAction.PASS
        assert decision.path == "/hindi/news"

    def test_api_paths_pass_through(self):
        decision = canonicalize("/api/public/news", {"np_locale": "gu"})

        assert decision.action == LocaleAction.PASS
        assert decision.cookie_writes == {}

    @pytest.mark.parametrize("path", ["/logo.png", "/_next/x", "/public/broadcast", "/hi/favicon.ico"])
    def test_excluded_paths_pass_through(self, path):
        decision = canonicalize(path, {"np_locale": "hi"})

        assert decision.action == LocaleAction.PASS
        assert decision.path == path
        assert decision.cookie_writes == {}

    def test_no_cookies_passes_through(self):
        decision = canonicalize("/sports", {})

        assert decision.action == LocaleAction.PASS
        assert decision.locale is None


class TestPathHelpers:

    def test_build_path_with_locale(self):
        assert build_path_with_locale(Locale.HINDI, "/gu/sports", "page=2") == "/hi/sports?page=2"
        assert build_path_with_locale(Locale.ENGLISH, "/hi/sports") == "/sports"
        assert build_path_with_locale(Locale.GUJARATI, "/") == "/gu"
        assert build_path_with_locale(Locale.ENGLISH, "/") == "/"
        assert build_path_with_locale(Locale.HINDI, "/news", "", "top") == "/hi/news#top"

    def test_strip_locale_prefix(self):
        assert strip_locale_prefix("/gu/hi/foo") == "/foo"
        assert strip_locale_prefix("/hi") == "/"
        assert strip_locale_prefix("/foo/hi") == "/foo/hi"

    def test_get_locale_from_path(self):
        assert get_locale_from_path("/gu/news") == Locale.GUJARATI
        assert get_locale_from_path("/news") is None

    def test_split_path(self):
        assert split_path("/a?b=1#c") == ("/a", "?b=1", "#c")
        assert split_path("") == ("/", "", "")

    def test_is_excluded_path(self):
        assert is_excluded_path("/api/health")
        assert is_excluded_path("/robots.txt")
        assert not is_excluded_path("/sports")


PREFIXES = ["", "en", "hi", "gu", "EN", "Hi", "xx"]
RESTS = ["", "news", "news/world", "about.html", "hi", "api/public/news", "/evil.example/x", "\\evil.example/x"]
COOKIE_VALUES = {
    "np_locale": [None, "en", "hi", "gu", "hindi", "bogus"],
    "np_lang": [None, "gu"],
    "NEXT_LOCALE": [None, "hi"],
}


def _generated_paths():
    for first, second in itertools.product(PREFIXES, repeat=2):
        for rest in RESTS:
            segments = [s for s in (first, second, rest) if s]
            yield "/" + "/".join(segments)
    yield from ["/api/public/news", "/_next/static/x.js", "/public/ui-labels", "/hi/"]


def _generated_cookies():
    names = list(COOKIE_VALUES)
    for values in itertools.product(*COOKIE_VALUES.values()):
        yield {name: value for name, value in zip(names, values) if value is not None}


def test_canonicalize_is_idempotent():
    """Applying the decision, cookies included, and canonicalizing again changes nothing."""
    checked = 0
    for path in set(_generated_paths()):
        for cookies in _generated_cookies():
            first = canonicalize(path, cookies)
            browser_cookies = {**cookies, **first.cookie_writes}
            second = canonicalize(first.visible_path, browser_cookies)

            assert second.visible_path == first.visible_path, (path, cookies)
            assert second.action != LocaleAction.REDIRECT, (path, cookies)
            assert not first.visible_path.startswith(("//", "/\\")), (path, cookies)
            checked += 1

    assert checked > 1000
