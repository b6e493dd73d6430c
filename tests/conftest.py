"""
Shared fixtures for backend configuration.
"""
import pytest

from helpers import BACKEND_ORIGIN

_BACKEND_ENV = ("API_BASE", "NEWSPULSE_API_BASE", "BACKEND_URL", "COMMUNITY_API_BASE")


@pytest.fixture
def no_backend(monkeypatch):
    """No backend origin configured."""
    for name in _BACKEND_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def with_backend(monkeypatch, no_backend):
    """Backend origin configured (with a trailing /api that gets stripped)."""
    monkeypatch.setenv("API_BASE", f"{BACKEND_ORIGIN}/api/")
