"""Shared test fixtures and configuration.

Sets environment defaults before any wastecal imports so a developer's
.env can't point the tests at the real SBAZV feed, and provides a
controllable clock plus helpers for faking the httpx client.
"""

import os

# Patch env vars BEFORE any wastecal imports
os.environ.setdefault("SBAZV_ICS_URL", "")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import httpx
import pytest

FEED_URL = (
    "https://fahrzeuge.sbazv.de/WasteManagementSuedbrandenburg/WasteManagementServiceServlet"
    "?ApplicationName=Calendar&SubmitAction=sync&StandortID=123456&AboID=7890&Fra=P;R;GS;L;WB"
)

SAMPLE_ICS = (
    "BEGIN:VCALENDAR\r\n"
    "VERSION:2.0\r\n"
    "PRODID:-//SBAZV//Abfuhrkalender//DE\r\n"
    "BEGIN:VEVENT\r\n"
    "UID:sbazv-1\r\n"
    "SUMMARY:Restmülltonne \r\n"
    "DTSTART;VALUE=DATE:20250610\r\n"
    "DTEND;VALUE=DATE:20250611\r\n"
    "LOCATION:Dorfaue 5\\, Königs Wusterhausen\r\n"
    "END:VEVENT\r\n"
    "BEGIN:VEVENT\r\n"
    "UID:sbazv-2\r\n"
    "SUMMARY:Gelbe Säcke\r\n"
    "DTSTART;VALUE=DATE:20250612\r\n"
    "END:VEVENT\r\n"
    "BEGIN:VEVENT\r\n"
    "UID:sbazv-3\r\n"
    "SUMMARY:Weihnachtsbäume\r\n"
    "DTSTART;VALUE=DATE:20250110\r\n"
    "END:VEVENT\r\n"
    "BEGIN:VEVENT\r\n"
    "UID:sbazv-4\r\n"
    "SUMMARY:Papiertonne\r\n"
    "DTSTART;VALUE=DATE:20250618\r\n"
    "END:VEVENT\r\n"
    "END:VCALENDAR\r\n"
)


class FakeClock:
    """Callable clock whose time only moves when a test says so."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 6, 2, 6, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def make_response(status: int = 200, text: str = SAMPLE_ICS, url: str = FEED_URL) -> httpx.Response:
    """A real httpx.Response, so raise_for_status behaves like production."""
    return httpx.Response(status, text=text, request=httpx.Request("GET", url))


def make_client(response: httpx.Response | None = None, side_effect=None) -> AsyncMock:
    """An AsyncMock standing in for `httpx.AsyncClient(...)` as a context manager."""
    mock_client = AsyncMock()
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    if side_effect is not None:
        mock_client.get = AsyncMock(side_effect=side_effect)
    else:
        mock_client.get = AsyncMock(return_value=response or make_response())
    return mock_client


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache():
    from wastecal.data.cache import CollectionCache
    return CollectionCache()
