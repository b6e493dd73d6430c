"""
Tests for locale parsing and UI labels.
"""
import pytest

from newspulse.i18n.locale import (
    Locale,
    LocaleContext,
    load_translations,
    preferred_locale_from_cookies,
    t,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("en", Locale.ENGLISH),
        ("HI", Locale.HINDI),
        (" gu ", Locale.GUJARATI),
        ("Hindi", Locale.HINDI),
        ("gujarati", Locale.GUJARATI),
        ("fr", None),
        ("", None),
        (None, None),
    ],
)
def test_from_code(raw, expected):
    assert Locale.from_code(raw) == expected


def test_preferred_locale_from_cookies():
    assert preferred_locale_from_cookies({}) is None
    assert preferred_locale_from_cookies({"NEXT_LOCALE": "gu", "np_lang": "hi"}) == Locale.HINDI
    assert preferred_locale_from_cookies({"np_locale": "??", "NEXT_LOCALE": "english"}) == Locale.ENGLISH


def test_every_locale_has_the_english_keys():
    def keys(tree, prefix=""):
        for key, value in tree.items():
            if isinstance(value, dict):
                yield from keys(value, f"{prefix}{key}.")
            else:
                yield f"{prefix}{key}"

    english = set(keys(load_translations(Locale.ENGLISH)))
    for locale in (Locale.HINDI, Locale.GUJARATI):
        assert set(keys(load_translations(locale))) == english


def test_translate_with_interpolation():
    assert t("category.empty", Locale.ENGLISH, title="Sports") == "No Sports news published yet."


def test_missing_key_returns_key():
    assert t("no.such.key", Locale.HINDI) == "no.such.key"


def test_context_locale():
    LocaleContext.set(Locale.GUJARATI)
    try:
        assert t("nav.home") == load_translations(Locale.GUJARATI)["nav"]["home"]
    finally:
        LocaleContext.reset()
    assert LocaleContext.get() == Locale.ENGLISH
