"""
Blocklist filtering and note annotation.

Rules:
- an event is dropped if its title exactly equals a blocklist entry (case-sensitive)
- kept events stay in their original order
- a note (looked up by lower-cased title) is appended to the description
  below a "--- Notes ---" marker; an existing notes section is replaced,
  so running the filter twice does not stack notes
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

from unical.model import EventRecord

NOTES_MARKER = "--- Notes ---"


@dataclass
class FilterResult:
    events: list[EventRecord]
    annotated: int = 0
    dropped: int = 0


def strip_notes_section(description: str) -> str:
    """
    Remove a previously appended notes section (marker to end of text).
    """
    if description.startswith(NOTES_MARKER + "\n") or description == NOTES_MARKER:
        return ""
    sep = "\n\n" + NOTES_MARKER + "\n"
    pos = description.find(sep)
    if pos == -1:
        return description
    return description[:pos]


def annotate_description(description: str, note: str) -> str:
    base = strip_notes_section(description or "")
    if base:
        return f"{base}\n\n{NOTES_MARKER}\n{note}"
    return f"{NOTES_MARKER}\n{note}"


def filter_events(
    events: Iterable[EventRecord],
    blocklist: Iterable[str],
    notes: Mapping[str, str] | None = None,
) -> FilterResult:
    """
    Drop blocklisted events and annotate the rest with notes.

    Mutates description on kept records only. Never raises.
    """
    blocked = set(blocklist)
    notes = notes or {}

    kept: list[EventRecord] = []
    annotated = 0
    dropped = 0
    for ev in events:
        title = ev.title or ""
        if title in blocked:
            dropped += 1
            continue

        note = notes.get(title.lower(), "") if title else ""
        if note:
            ev.description = annotate_description(ev.description, note)
            annotated += 1
        kept.append(ev)

    return FilterResult(events=kept, annotated=annotated, dropped=dropped)
