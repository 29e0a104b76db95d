"""Shared fixtures for learnpath tests."""

import pytest

from factories import FakeBackend, FakeClock, FakeTimerFactory, FakeWallClock


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Keep developer .env values out of the tests."""
    from learnpath.config import get_settings

    for name in ("API_BASE_URL", "API_TOKEN", "USER_ID", "PROGRESS_DEBOUNCE_SECONDS", "OPTIMISTIC_TTL_SECONDS"):
        monkeypatch.delenv(f"LEARNPATH_{name}", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def client(backend):
    api = backend.client()
    yield api
    api.close()


@pytest.fixture
def timers():
    return FakeTimerFactory()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def wall_clock():
    return FakeWallClock()
