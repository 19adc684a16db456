"""
Zernsdorf Waste Calendar — Data Models.

CalendarEvent is the transient output of the ICS parser; WasteCollection is
the domain record every other layer works with. FetchResult and the status
types are built fresh for each service call and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum


class WasteCategory(Enum):
    """The closed set of collection types tracked by the portal."""

    RESTMUELL = "restmuell"
    PAPIER = "papier"
    GELBESACK = "gelbesack"
    BIO = "bio"
    LAUBSAECKE = "laubsaecke"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def sbazv_code(self) -> str:
        """Value for the SBAZV `Fra` filter ('' when SBAZV has no such feed)."""
        return _SBAZV_CODES[self]


_DISPLAY_NAMES = {
    WasteCategory.RESTMUELL: "Restmüll",
    WasteCategory.PAPIER: "Papier/Altpapier",
    WasteCategory.GELBESACK: "Gelber Sack",
    WasteCategory.BIO: "Biotonne",
    WasteCategory.LAUBSAECKE: "Laubsäcke",
}

# Bio is not collected by SBAZV
_SBAZV_CODES = {
    WasteCategory.RESTMUELL: "R",
    WasteCategory.PAPIER: "P",
    WasteCategory.GELBESACK: "WB",
    WasteCategory.BIO: "",
    WasteCategory.LAUBSAECKE: "L",
}


class FetchSource(Enum):
    """Provenance of the collections in a FetchResult."""

    SBAZV = "sbazv"
    CACHE = "cache"
    FALLBACK = "fallback"


@dataclass
class CalendarEvent:
    """One VEVENT block as read from an ICS document.

    `start`/`end` are a `date` for whole-day values, a naive `datetime` for
    local times and a UTC-aware `datetime` for values ending in "Z".
    """

    uid: str
    summary: str
    start: date | datetime
    end: date | datetime | None = None
    description: str | None = None
    location: str | None = None


@dataclass
class WasteCollection:
    """A single pickup of one waste category on one calendar day."""

    id: str                      # feed UID or "fallback-<category>-<n>"
    date: date
    type: WasteCategory
    street: str | None = None    # address tag the batch was fetched for


@dataclass
class FetchResult:
    """Outcome of one orchestrator call.

    `success` is False only when no usable data could be produced
    (rejected upload, invalid explicit URL); the degradation chain of
    fetch_calendar always yields success=True.
    """

    success: bool
    collections: list[WasteCollection]
    fetched_at: datetime
    source: FetchSource
    error: str | None = None


@dataclass
class CacheStatus:
    """Snapshot of the collection cache for diagnostic surfaces."""

    has_cache: bool
    fetched_at: datetime | None
    collection_count: int
    age_minutes: int | None


@dataclass
class ConfigStatus:
    """Whether a global feed URL is configured, plus the cache state."""

    has_feed_url: bool
    cache: CacheStatus


@dataclass
class UrlProbeResult:
    """Result of testing a candidate feed URL without touching the cache."""

    success: bool
    message: str
    event_count: int = 0
    error: str | None = None
    hint: str | None = None
    content_preview: str | None = None


@dataclass
class FeedIds:
    """Identifiers encoded in an SBAZV feed URL."""

    location_id: str      # StandortID
    subscription_id: str  # AboID


@dataclass
class FeedDownload:
    """Result of a single feed download: either content or an error reason."""

    ok: bool
    content: str | None = None
    error: str | None = None
    status_code: int | None = None
