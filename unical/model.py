"""
Central data model definitions used across the project.

This module defines the canonical structure of event records and of the
user configuration so that:
- the filter engine, the upcoming index and the interactive session share the same field names
- blocklist and notes rules live in exactly one place
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


@dataclass
class EventRecord:
    """
    One calendar event (a single VEVENT instance) as seen by the filter logic.

    Recurring series show up as many records sharing the same title.
    Title is the only identity used for deduplication, so two unrelated
    events with the same display name are treated as one series.
    """

    title: str
    start: Optional[datetime]
    description: str = ""
    raw: Any = None


@dataclass
class CalendarConfig:
    """
    User configuration as stored in config/blocklist.yaml.
    """

    origin_url: str = ""
    blocklist: list[str] = field(default_factory=list)
    notes: dict[str, str] = field(default_factory=dict)

    def is_blocked(self, title: str) -> bool:
        # exact, case-sensitive match
        return title in self.blocklist

    def toggle_blocked(self, title: str) -> bool:
        """
        Toggle blocklist membership of title and return the new blocked flag.

        Removal filters out every exact match, so the list can never end up
        holding the same title twice.
        """
        if title in self.blocklist:
            self.blocklist = [t for t in self.blocklist if t != title]
            return False
        self.blocklist.append(title)
        return True

    def note_for(self, title: str) -> str:
        return self.notes.get(title.lower(), "")

    def set_note(self, title: str, text: str) -> None:
        """
        Store a note for title (key is lower-cased). Empty text removes the note.
        """
        key = title.lower()
        text = text.strip()
        if not text:
            self.notes.pop(key, None)
            return
        self.notes[key] = text

    def copy(self) -> CalendarConfig:
        return CalendarConfig(
            origin_url=self.origin_url,
            blocklist=list(self.blocklist),
            notes=dict(self.notes),
        )
