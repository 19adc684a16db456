"""
Zernsdorf Waste Calendar — ICS Parser.

Turns raw iCalendar text from the SBAZV feed (or a manual upload) into
CalendarEvent records. Only the subset the waste feed uses is understood:
VEVENT blocks with UID, SUMMARY, DTSTART, DTEND, DESCRIPTION and LOCATION.

Maximally tolerant: incomplete events, unknown properties and garbled
dates are skipped one event at a time, never raised. Whether the text is
wrapped in BEGIN:VCALENDAR is the caller's concern.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from enum import Enum

from icalendar.parser import Contentlines

from wastecal.data.models import CalendarEvent

logger = logging.getLogger(__name__)


class IcsProperty(Enum):
    """VEVENT properties the parser reads. Anything else is ignored."""

    UID = "UID"
    SUMMARY = "SUMMARY"
    DTSTART = "DTSTART"
    DTEND = "DTEND"
    DESCRIPTION = "DESCRIPTION"
    LOCATION = "LOCATION"


_PROPERTY_BY_KEY: dict[str, IcsProperty] = {prop.value: prop for prop in IcsProperty}


def parse_ics(ics_text: str) -> list[CalendarEvent]:
    """Parse ICS text into the list of complete VEVENTs, in document order.

    An event is kept only if it has a UID, a SUMMARY and a decodable DTSTART.
    """
    events: list[CalendarEvent] = []
    current: dict[IcsProperty, object] | None = None
    dropped = 0

    for name, value in _content_lines(ics_text):
        if name == "BEGIN" and value == "VEVENT":
            current = {}
        elif name == "END" and value == "VEVENT" and current is not None:
            event = _build_event(current)
            if event is None:
                dropped += 1
            else:
                events.append(event)
            current = None
        elif current is not None:
            _read_property(name, value, current)

    if dropped:
        logger.debug("Dropped %d incomplete VEVENT block(s)", dropped)
    return events


def count_vevents(ics_text: str) -> int:
    """Count BEGIN:VEVENT markers without parsing the events."""
    return ics_text.count("BEGIN:VEVENT")


def parse_ics_date(value: str) -> date | datetime | None:
    """Decode YYYYMMDD, YYYYMMDDTHHMMSS or YYYYMMDDTHHMMSSZ.

    Returns None for anything that doesn't decode to a real date/time.
    """
    value = value.strip()
    try:
        year = int(value[0:4])
        month = int(value[4:6])
        day = int(value[6:8])

        if len(value) == 8:
            return date(year, month, day)

        hour = int(value[9:11])
        minute = int(value[11:13])
        second = int(value[13:15])

        if value.endswith("Z"):
            return datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)
        return datetime(year, month, day, hour, minute, second)
    except ValueError:
        return None


def _content_lines(ics_text: str) -> list[tuple[str, str]]:
    """Unfold and split into (NAME, raw value) pairs.

    icalendar unfolds and splits the content lines. Name and value are cut
    at the first colon here, not with Contentline.parts(), which decodes
    escaped commas and semicolons in every value; each property applies
    its own rules below.
    Lines without a colon are skipped.
    """
    pairs: list[tuple[str, str]] = []
    for line in Contentlines.from_ical(ics_text):
        key_part, sep, value = line.partition(":")
        if not sep:
            continue
        pairs.append((key_part.split(";", 1)[0].upper(), value))
    return pairs


def _read_property(name: str, value: str, current: dict[IcsProperty, object]) -> None:
    """Store one property value into the partial event."""
    prop = _PROPERTY_BY_KEY.get(name)
    if prop is None:
        return

    if prop is IcsProperty.UID:
        current[prop] = value
    elif prop is IcsProperty.SUMMARY:
        current[prop] = value.strip()
    elif prop in (IcsProperty.DTSTART, IcsProperty.DTEND):
        current[prop] = parse_ics_date(value)
    elif prop is IcsProperty.DESCRIPTION:
        current[prop] = value.replace("\\n", "\n")
    elif prop is IcsProperty.LOCATION:
        current[prop] = value.replace("\\,", ",").strip()


def _build_event(fields: dict[IcsProperty, object]) -> CalendarEvent | None:
    uid = fields.get(IcsProperty.UID)
    summary = fields.get(IcsProperty.SUMMARY)
    start = fields.get(IcsProperty.DTSTART)
    if not uid or not summary or start is None:
        return None

    return CalendarEvent(
        uid=uid,
        summary=summary,
        start=start,
        end=fields.get(IcsProperty.DTEND),
        description=fields.get(IcsProperty.DESCRIPTION),
        location=fields.get(IcsProperty.LOCATION),
    )
