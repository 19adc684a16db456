"""
Zernsdorf Waste Calendar — Fallback Schedule Generator.

When the SBAZV feed is unreachable or not configured, the portal still
shows a plausible schedule built from the usual SBAZV cadences:

    Restmüll      every 2 weeks, Tuesday      12 pickups
    Papier        every 4 weeks, Wednesday     6 pickups (skips the first)
    Gelber Sack   every 2 weeks, Thursday     12 pickups
    Biotonne      weekly, Friday              12 pickups (April–October)
    Laubsäcke     every 2 weeks, Monday        4 pickups (October–November)

Generated records carry "fallback-" ids so they can never be mistaken for
feed data. Also holds the small date helpers callers use to present a
schedule (next pickup, upcoming window).
"""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date, timedelta

from wastecal.data.models import WasteCategory, WasteCollection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Cadence:
    category: WasteCategory
    weekday: int                # calendar.MONDAY .. calendar.SUNDAY
    interval_days: int
    occurrences: int
    months: tuple[int, ...] | None = None   # None = all year
    skip_first: bool = False


_CADENCES: tuple[_Cadence, ...] = (
    _Cadence(WasteCategory.RESTMUELL, calendar.TUESDAY, 14, 12),
    _Cadence(WasteCategory.PAPIER, calendar.WEDNESDAY, 28, 6, skip_first=True),
    _Cadence(WasteCategory.GELBESACK, calendar.THURSDAY, 14, 12),
    _Cadence(WasteCategory.BIO, calendar.FRIDAY, 7, 12, months=tuple(range(4, 11))),
    _Cadence(WasteCategory.LAUBSAECKE, calendar.MONDAY, 14, 4, months=(10, 11)),
)


def next_weekday(start: date, weekday: int) -> date:
    """Return the next `weekday` strictly after `start`.

    If `start` already is that weekday, the result is one week later.
    """
    days_ahead = weekday - start.weekday()
    if days_ahead <= 0:
        days_ahead += 7
    return start + timedelta(days=days_ahead)


def generate_fallback(
    street: str | None = None,
    today: date | None = None,
) -> list[WasteCollection]:
    """Build the synthetic schedule starting from `today`, sorted by date."""
    if today is None:
        today = date.today()

    collections: list[WasteCollection] = []
    for cadence in _CADENCES:
        if cadence.months is not None and today.month not in cadence.months:
            continue

        current = next_weekday(today, cadence.weekday)
        if cadence.skip_first:
            current += timedelta(days=7)

        for i in range(cadence.occurrences):
            collections.append(
                WasteCollection(
                    id=f"fallback-{cadence.category.value}-{i}",
                    date=current,
                    type=cadence.category,
                    street=street,
                )
            )
            current += timedelta(days=cadence.interval_days)

    collections.sort(key=lambda c: c.date)
    logger.info(
        "Generated %d fallback collections from %s", len(collections), today.isoformat(),
    )
    return collections


def next_collection(
    collections: list[WasteCollection],
    category: WasteCategory | None = None,
    today: date | None = None,
) -> WasteCollection | None:
    """First collection dated today or later, optionally of one category.

    Scans in list order, so pass a date-sorted list.
    """
    if today is None:
        today = date.today()

    for collection in collections:
        if category is not None and collection.type is not category:
            continue
        if collection.date >= today:
            return collection
    return None


def upcoming_collections(
    collections: list[WasteCollection],
    days: int = 14,
    today: date | None = None,
) -> list[WasteCollection]:
    """Collections dated within [today, today + days], in list order."""
    if today is None:
        today = date.today()
    end = today + timedelta(days=days)
    return [c for c in collections if today <= c.date <= end]
