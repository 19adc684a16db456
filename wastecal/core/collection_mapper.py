"""Collection mapper — parsed VEVENTs to WasteCollection records."""

from __future__ import annotations

import logging
from datetime import date, datetime

from wastecal.core.classifier import classify
from wastecal.data.models import CalendarEvent, WasteCollection

logger = logging.getLogger(__name__)


def to_collections(
    events: list[CalendarEvent],
    street: str | None = None,
) -> list[WasteCollection]:
    """Classify each event and keep the ones with a tracked category.

    The street tag is applied to every record as given; the event's own
    LOCATION is not consulted. Input order is preserved.
    """
    collections: list[WasteCollection] = []

    for event in events:
        category = classify(event.summary)
        if category is None:
            logger.debug("Ignoring event '%s' (%s)", event.summary, event.uid)
            continue

        collections.append(
            WasteCollection(
                id=event.uid,
                date=calendar_day(event.start),
                type=category,
                street=street,
            )
        )

    return collections


def calendar_day(value: date | datetime) -> date:
    """Reduce a parsed DTSTART to the local calendar day it falls on."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    return value
