"""Tests for wastecal.config — environment-driven settings."""

import pytest
from pydantic import ValidationError

from wastecal.config import (
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    Settings,
    _load_settings,
)
from wastecal.core.waste_service import WasteCalendarService
from wastecal.integrations import sbazv_feed


class TestSettings:
    def test_defaults(self):
        s = Settings()
        assert s.SBAZV_ICS_URL == ""
        assert s.CACHE_TTL_HOURS == 12
        assert s.FETCH_TIMEOUT_SECONDS == 15
        assert s.CALENDAR_TITLE == "Müllabfuhr Zernsdorf"
        assert s.has_feed_url is False

    def test_url_is_stripped(self):
        s = Settings(SBAZV_ICS_URL="  https://fahrzeuge.sbazv.de/x?StandortID=1&AboID=2 \n")
        assert s.SBAZV_ICS_URL.endswith("AboID=2")
        assert s.has_feed_url is True

    def test_numeric_strings_are_parsed(self):
        s = Settings(CACHE_TTL_HOURS="6", FETCH_TIMEOUT_SECONDS="2.5")
        assert s.CACHE_TTL_HOURS == 6.0
        assert s.FETCH_TIMEOUT_SECONDS == 2.5

    @pytest.mark.parametrize("field", ["CACHE_TTL_HOURS", "FETCH_TIMEOUT_SECONDS"])
    def test_non_positive_rejected(self, field):
        with pytest.raises(ValidationError):
            Settings(**{field: "0"})

    def test_garbage_rejected(self):
        with pytest.raises(ValidationError):
            Settings(CACHE_TTL_HOURS="soon")


def test_load_settings_reads_environment(monkeypatch):
    monkeypatch.setenv("SBAZV_ICS_URL", "https://fahrzeuge.sbazv.de/x?StandortID=1&AboID=2")
    monkeypatch.setenv("CACHE_TTL_HOURS", "3")
    monkeypatch.setenv("CALENDAR_TITLE", "Abfuhr")
    s = _load_settings()
    assert s.has_feed_url is True
    assert s.CACHE_TTL_HOURS == 3.0
    assert s.CALENDAR_TITLE == "Abfuhr"


def test_defaults_have_one_source():
    s = Settings()
    assert s.USER_AGENT == DEFAULT_USER_AGENT
    assert s.FETCH_TIMEOUT_SECONDS == DEFAULT_TIMEOUT_SECONDS
    assert sbazv_feed.download_feed.__defaults__ == (DEFAULT_TIMEOUT_SECONDS, DEFAULT_USER_AGENT)
    assert DEFAULT_USER_AGENT in WasteCalendarService.__init__.__defaults__
