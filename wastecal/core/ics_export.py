"""Calendar export — WasteCollection records to a downloadable ICS document.

Built with the icalendar library; every pickup becomes a whole-day event.
No DTSTAMP is written, so the same input always yields the same text.
"""

from __future__ import annotations

from datetime import timedelta

from icalendar import Calendar as iCalendar
from icalendar import Event as iEvent

from wastecal.data.models import WasteCollection

PRODID = "-//Zernsdorf Portal//Waste Calendar//DE"


def _build_vevent(collection: WasteCollection) -> iEvent:
    name = collection.type.display_name
    description = f"Müllabholung {name}"
    if collection.street:
        description += f" - {collection.street}"

    event = iEvent()
    event.add("uid", collection.id)
    event.add("dtstart", collection.date)
    event.add("dtend", collection.date + timedelta(days=1))
    event.add("summary", f"{name} - Abholung")
    event.add("description", description)
    return event


def to_ics(collections: list[WasteCollection], calendar_title: str) -> str:
    """Serialize collections into an ICS calendar named `calendar_title`."""
    cal = iCalendar()
    cal.add("version", "2.0")
    cal.add("prodid", PRODID)
    cal.add("calscale", "GREGORIAN")
    cal.add("method", "PUBLISH")
    cal.add("x-wr-calname", calendar_title)

    for collection in collections:
        cal.add_component(_build_vevent(collection))

    return cal.to_ical().decode("utf-8")
