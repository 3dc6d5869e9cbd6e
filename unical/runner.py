"""
Batch mode.

run_filter:   config -> fetch -> filter/annotate -> ical/filtered_calendar.ics
run_upcoming: config -> fetch -> distinct upcoming titles in a time window (nothing written)

Errors are not caught here; the CLI logs them and exits non-zero.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import Callable, Optional

from icalendar import Calendar

from unical.errors import ConfigError, OutputError
from unical.fetch import fetch_calendar
from unical.filtering import FilterResult, filter_events
from unical.ics_codec import build_calendar, event_records, serialize_calendar
from unical.model import CalendarConfig, EventRecord
from unical.storage import load_config
from unical.upcoming import CutoffPolicy, cutoff_for, upcoming_events

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = Path("ical") / "filtered_calendar.ics"
REPORT_DAYS = 7


def _load_with_url(config_path: Optional[str | Path]) -> CalendarConfig:
    config = load_config(config_path)
    if not config.origin_url:
        raise ConfigError("No origin_url configured - run 'unical configure' first")
    return config


def write_output(cal: Calendar, out_path: str | Path) -> Path:
    out = Path(out_path)
    try:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(serialize_calendar(cal))
    except OSError as exc:
        raise OutputError(f"Cannot write {out}: {exc}") from exc
    return out


def run_filter(
    config_path: Optional[str | Path] = None,
    output_path: str | Path = DEFAULT_OUTPUT,
    fetch: Callable[[str], Calendar] = fetch_calendar,
) -> FilterResult:
    """
    One-shot filtering run. Returns the filter result for reporting.
    """
    config = _load_with_url(config_path)

    source = fetch(config.origin_url)
    records = event_records(source)

    result = filter_events(records, config.blocklist, config.notes)
    logger.info("Kept %d of %d events (%d blocked)", len(result.events), len(records), result.dropped)
    if result.annotated:
        logger.info("Added notes to %d events", result.annotated)

    out = write_output(build_calendar(result.events, source=source), output_path)
    logger.info("Filtered iCal saved to: %s", out)
    return result


def parse_day(value: str) -> date:
    """
    Parse a YYYY-MM-DD argument.
    """
    return datetime.strptime(value.strip(), "%Y-%m-%d").date()


def report_window(
    start: Optional[date] = None,
    end: Optional[date] = None,
    now: Optional[datetime] = None,
) -> tuple[datetime, datetime]:
    """
    Return (cutoff, horizon).

    Without dates: from the current instant to REPORT_DAYS ahead.
    With dates: [start 00:00, end 00:00) in local time.
    """
    if start is None or end is None:
        now = now or datetime.now().astimezone()
        return cutoff_for(CutoffPolicy.NOW, now), now + timedelta(days=REPORT_DAYS)

    cutoff = datetime.combine(start, time.min).astimezone()
    horizon = datetime.combine(end, time.min).astimezone()
    return cutoff, horizon


def run_upcoming(
    config_path: Optional[str | Path] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    now: Optional[datetime] = None,
    fetch: Callable[[str], Calendar] = fetch_calendar,
) -> list[EventRecord]:
    """
    Return the distinct non-blocked events in the report window, earliest first.
    """
    config = _load_with_url(config_path)
    cutoff, horizon = report_window(start, end, now)

    records = event_records(fetch(config.origin_url))
    kept = filter_events(records, config.blocklist).events
    events = upcoming_events(kept, cutoff, horizon)
    logger.info("Collected %d upcoming events between %s and %s", len(events), cutoff, horizon)
    return events
