"""Tests for environment-driven settings."""

from config.settings import Settings
from util.enums import DateRange


def test_env_overrides_defaults(monkeypatch):
    monkeypatch.delenv("PAGE_SIZE", raising=False)
    monkeypatch.setenv("POLL_INTERVAL_MS", "500")
    monkeypatch.setenv("DEFAULT_DATE_RANGE", DateRange.WEEK.value)
    loaded = Settings()
    assert loaded.POLL_INTERVAL_MS == 500
    assert loaded.DEFAULT_DATE_RANGE is DateRange.WEEK
    assert loaded.PAGE_SIZE == 1000
