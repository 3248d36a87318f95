"""Pytest configuration and fixtures."""

import pytest

from notecards.config import get_settings
from notecards.db.cosmos import get_settings as get_cosmos_settings


class FakeTimer:
    """Timer handle returned by FakeTimers; fired by the test, never by a clock."""

    def __init__(self, delay: float, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeTimers:
    """Drop-in for ``loop.call_later`` that records timers instead of running them."""

    def __init__(self):
        self.timers: list[FakeTimer] = []

    def __call__(self, delay: float, callback) -> FakeTimer:
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def active(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def fire_all(self) -> None:
        for timer in self.active:
            timer.fired = True
            timer.callback()


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Start every test from default settings."""
    for name in (
        "AUTOSAVE_DELAY_MS",
        "AUTOSAVE_ON_EVERY_CHANGE",
        "REVIEW_DUE_CARD_LIMIT",
        "REVIEW_NEW_CARD_LIMIT",
        "REVIEW_SESSION_TTL_SECONDS",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    get_cosmos_settings.cache_clear()
    yield
    get_settings.cache_clear()
    get_cosmos_settings.cache_clear()


@pytest.fixture
def timers():
    return FakeTimers()
