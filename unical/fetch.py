from __future__ import annotations

import logging
import os

import requests
from icalendar import Calendar

from unical.errors import FetchError
from unical.ics_codec import event_records, parse_calendar
from unical.model import EventRecord

logger = logging.getLogger(__name__)


HEADERS = {"User-Agent": "UniCal/1.0", "Accept": "text/calendar, */*"}
DEFAULT_TIMEOUT = 30.0


def _timeout_from_env() -> float:
    raw = os.environ.get("UNICAL_FETCH_TIMEOUT", "").strip()
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid UNICAL_FETCH_TIMEOUT=%r", raw)
        return DEFAULT_TIMEOUT


def fetch_calendar(url: str, timeout: float | None = None) -> Calendar:
    """
    Download an .ics feed and return the parsed calendar.

    Raises:
        FetchError: transport failure, HTTP error status or a non-calendar body
        ParseError: the body looks like a calendar but cannot be parsed
    """
    url = (url or "").strip()
    if not url:
        raise FetchError("No calendar URL configured")

    logger.info("Fetching calendar from %s", url)
    try:
        resp = requests.get(url, headers=HEADERS, timeout=timeout if timeout is not None else _timeout_from_env())
        resp.raise_for_status()
    except (requests.RequestException, ValueError) as exc:
        # urllib3's LocationParseError (bad host label) is a ValueError, not a RequestException
        raise FetchError(f"Could not fetch {url}: {exc}") from exc

    body = resp.content
    if b"BEGIN:VCALENDAR" not in body[:2048].upper():
        raise FetchError(f"Response from {url} is not an iCalendar document")

    return parse_calendar(body)


def fetch_events(url: str) -> list[EventRecord]:
    """
    Fetch url and return its events in document order.
    """
    records = event_records(fetch_calendar(url))
    logger.info("Fetched %d events", len(records))
    return records
