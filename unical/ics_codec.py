"""
iCalendar (.ics) parsing and serialization.

Thin layer over the icalendar library:
- bytes -> Calendar and back
- Calendar -> EventRecord list (best-effort start parsing per event)
- kept EventRecords -> fresh output Calendar
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Any, Iterable, Optional

from icalendar import Calendar, Event

from unical.errors import ParseError
from unical.model import EventRecord

logger = logging.getLogger(__name__)

PRODID = "-//UniCal//Filtered Calendar//EN"


def parse_calendar(data: bytes | str) -> Calendar:
    """
    Parse raw iCalendar text. Raises ParseError for malformed documents.
    """
    try:
        cal = Calendar.from_ical(data)
    except (ValueError, IndexError, KeyError) as exc:
        raise ParseError(f"Malformed calendar document: {exc}") from exc
    if getattr(cal, "name", None) != "VCALENDAR":
        raise ParseError(f"Top-level component is {getattr(cal, 'name', None)!r}, expected 'VCALENDAR'")
    return cal


def serialize_calendar(cal: Calendar) -> bytes:
    return cal.to_ical()


def _text(component: Any, name: str) -> str:
    value = component.get(name)
    return "" if value is None else str(value)


def _as_local(value: Any) -> Optional[datetime]:
    """
    Normalize a DTSTART value to an aware local datetime.

    Date-only values become local midnight, naive datetimes are taken as local time.
    """
    if isinstance(value, datetime):
        return value.astimezone()
    if isinstance(value, date):
        return datetime.combine(value, time.min).astimezone()
    return None


def event_start(component: Any) -> Optional[datetime]:
    """
    Return the start of one VEVENT, or None if it is missing or malformed.
    """
    if component.get("DTSTART") is None:
        return None
    try:
        return _as_local(component.decoded("DTSTART"))
    except (ValueError, TypeError, KeyError, OverflowError, OSError):
        return None


def event_records(cal: Calendar) -> list[EventRecord]:
    """
    Extract every VEVENT in document order.

    A bad timestamp only affects its own event (start=None).
    """
    records: list[EventRecord] = []
    for component in cal.walk("VEVENT"):
        start = event_start(component)
        title = _text(component, "SUMMARY")
        if start is None:
            logger.debug("No usable start time for event %r", title)
        records.append(
            EventRecord(
                title=title,
                start=start,
                description=_text(component, "DESCRIPTION"),
                raw=component,
            )
        )
    return records


def _component_for(record: EventRecord) -> Event:
    """
    Return the VEVENT for a record, rewriting DESCRIPTION if the record changed it.
    """
    if record.raw is None:
        ev = Event()
        ev.add("SUMMARY", record.title)
        if record.start is not None:
            ev.add("DTSTART", record.start)
        if record.description:
            ev.add("DESCRIPTION", record.description)
        return ev

    component = record.raw
    if _text(component, "DESCRIPTION") != record.description:
        if "DESCRIPTION" in component:
            del component["DESCRIPTION"]
        if record.description:
            component.add("DESCRIPTION", record.description)
    return component


def build_calendar(records: Iterable[EventRecord], source: Optional[Calendar] = None) -> Calendar:
    """
    Build a new calendar holding only the given records.

    Calendar-level properties and VTIMEZONE definitions are copied from source,
    so timezone references of the kept events stay resolvable.
    """
    out = Calendar()
    if source is not None:
        for key, value in source.items():
            out.add(key, value)
        for component in source.subcomponents:
            if component.name == "VTIMEZONE":
                out.add_component(component)

    if "VERSION" not in out:
        out.add("VERSION", "2.0")
    if "PRODID" not in out:
        out.add("PRODID", PRODID)

    for record in records:
        out.add_component(_component_for(record))
    return out
