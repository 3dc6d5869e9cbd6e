"""
Upcoming-event index.

Collapses recurring series (instances sharing a title) down to their next
occurrence at or after a cutoff, sorted by start time.

Two cutoff policies are used:
- START_OF_DAY: everything from today 00:00 on (interactive browser)
- NOW: everything from the current instant on (short-horizon report)
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Iterable, Optional

from unical.model import EventRecord


class CutoffPolicy(Enum):
    START_OF_DAY = "start_of_day"
    NOW = "now"


def start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def cutoff_for(policy: CutoffPolicy, now: datetime) -> datetime:
    if policy is CutoffPolicy.START_OF_DAY:
        return start_of_day(now)
    return now


def upcoming_events(
    events: Iterable[EventRecord],
    cutoff: datetime,
    horizon: Optional[datetime] = None,
) -> list[EventRecord]:
    """
    Return one record per distinct title: the earliest one with
    cutoff <= start (and start < horizon if given), sorted ascending by start.

    Records without a title or without a usable start are skipped.
    """
    earliest: dict[str, tuple[int, EventRecord]] = {}
    for i, ev in enumerate(events):
        if not ev.title or ev.start is None:
            continue
        if ev.start < cutoff:
            continue
        if horizon is not None and not ev.start < horizon:
            continue

        current = earliest.get(ev.title)
        if current is None or ev.start < current[1].start:
            earliest[ev.title] = (i, ev)

    # ties on start fall back to the input position of the kept instance
    ranked = sorted(earliest.values(), key=lambda item: (item[1].start, item[0]))
    return [ev for _, ev in ranked]
