"""
Interactive configuration session (state machine, no rendering).

States and transitions:

    MENU          --SET_URL-->    URL_INPUT
    MENU          --BROWSE-->     EVENT_BROWSER   (fetch + upcoming index, today cutoff)
    MENU          --SAVE-->       MENU            (persist config)
    MENU          --QUIT-->       DONE
    URL_INPUT     --CONFIRM-->    MENU            (commit URL)
    URL_INPUT     --CANCEL-->     MENU
    EVENT_BROWSER --TOGGLE-->     EVENT_BROWSER   (blocklist add/remove)
    EVENT_BROWSER --EDIT_NOTES--> NOTE_INPUT
    EVENT_BROWSER --BACK-->       MENU
    NOTE_INPUT    --CONFIRM-->    EVENT_BROWSER   (empty text removes the note)
    NOTE_INPUT    --CANCEL-->     EVENT_BROWSER

Fetching and saving are injected callables so the machine can be driven
without network, disk or terminal (see tests/test_session.py).
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from unical.errors import UnicalError
from unical.model import CalendarConfig, EventRecord
from unical.storage import load_config_or_default, save_config
from unical.upcoming import CutoffPolicy, cutoff_for, upcoming_events

logger = logging.getLogger(__name__)


class State(Enum):
    MENU = "menu"
    URL_INPUT = "url_input"
    EVENT_BROWSER = "events"
    NOTE_INPUT = "notes_input"
    DONE = "done"


class Action(Enum):
    SET_URL = "set_url"
    BROWSE = "browse"
    SAVE = "save"
    QUIT = "quit"
    CONFIRM = "confirm"
    CANCEL = "cancel"
    TOGGLE = "toggle"
    EDIT_NOTES = "edit_notes"
    BACK = "back"


@dataclass
class BrowserRow:
    index: int
    title: str
    start: Optional[datetime]
    description: str
    blocked: bool
    note: str


class Session:
    def __init__(
        self,
        config: CalendarConfig,
        fetch_events: Callable[[str], list[EventRecord]],
        save_config: Callable[[CalendarConfig], object],
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config
        self._fetch_events = fetch_events
        self._save_config = save_config
        self._clock = clock or (lambda: datetime.now().astimezone())
        self._saved = config.copy()

        self.state = State.MENU
        self.events: list[EventRecord] = []
        self.selected_index = 0
        self.message = ""
        self.url_draft = config.origin_url
        self.note_draft = ""

    @classmethod
    def from_store(
        cls,
        path: str | Path | None = None,
        fetch_events: Callable[[str], list[EventRecord]] | None = None,
    ) -> Session:
        """
        Build a session seeded from the persisted config (empty config if missing or broken).
        """
        if fetch_events is None:
            from unical.fetch import fetch_events as _fetch

            fetch_events = _fetch
        config = load_config_or_default(path)
        return cls(config, fetch_events, functools.partial(save_config, path=path))

    @property
    def dirty(self) -> bool:
        return self.config != self._saved

    @property
    def selected_event(self) -> Optional[EventRecord]:
        if 0 <= self.selected_index < len(self.events):
            return self.events[self.selected_index]
        return None

    def rows(self) -> list[BrowserRow]:
        # flags are recomputed from config on every call
        return [
            BrowserRow(
                index=i,
                title=ev.title,
                start=ev.start,
                description=ev.description,
                blocked=self.config.is_blocked(ev.title),
                note=self.config.note_for(ev.title),
            )
            for i, ev in enumerate(self.events)
        ]

    def dispatch(self, action: Action, index: Optional[int] = None, text: Optional[str] = None) -> State:
        """
        Apply one user action and return the new state.

        Actions not valid in the current state only set a message.
        """
        handler = _TRANSITIONS.get((self.state, action))
        if handler is None:
            self.message = f"'{action.value}' is not available in {self.state.value}"
            return self.state
        self.state = handler(self, index, text)
        return self.state

    # ------------------------------------------------------------------
    # Menu
    # ------------------------------------------------------------------

    def _on_set_url(self, index: Optional[int], text: Optional[str]) -> State:
        self.url_draft = self.config.origin_url
        return State.URL_INPUT

    def _on_browse(self, index: Optional[int], text: Optional[str]) -> State:
        if not self.config.origin_url:
            self.message = "Please set URL first"
            return State.MENU

        try:
            fetched = self._fetch_events(self.config.origin_url)
        except UnicalError as exc:
            logger.warning("Fetching %s failed: %s", self.config.origin_url, exc)
            self.message = f"Error fetching events: {exc}"
            return State.MENU

        cutoff = cutoff_for(CutoffPolicy.START_OF_DAY, self._clock())
        self.events = upcoming_events(fetched, cutoff)
        self.selected_index = 0
        self.message = f"Loaded {len(self.events)} unique upcoming events"
        return State.EVENT_BROWSER

    def _on_save(self, index: Optional[int], text: Optional[str]) -> State:
        try:
            self._save_config(self.config)
        except (UnicalError, OSError) as exc:
            logger.warning("Saving config failed: %s", exc)
            self.message = f"Error saving config: {exc}"
            return State.MENU

        self._saved = self.config.copy()
        self.message = "Configuration saved!"
        return State.MENU

    def _on_quit(self, index: Optional[int], text: Optional[str]) -> State:
        return State.DONE

    # ------------------------------------------------------------------
    # URL input
    # ------------------------------------------------------------------

    def _on_confirm_url(self, index: Optional[int], text: Optional[str]) -> State:
        value = self.url_draft if text is None else text
        self.config.origin_url = value.strip()
        self.url_draft = self.config.origin_url
        self.message = "URL updated!"
        return State.MENU

    def _on_cancel_url(self, index: Optional[int], text: Optional[str]) -> State:
        self.url_draft = self.config.origin_url
        return State.MENU

    # ------------------------------------------------------------------
    # Event browser
    # ------------------------------------------------------------------

    def _select(self, index: Optional[int]) -> Optional[EventRecord]:
        if not self.events:
            self.message = "No events loaded"
            return None
        idx = self.selected_index if index is None else index
        if not (0 <= idx < len(self.events)):
            self.message = "Out of range."
            return None
        self.selected_index = idx
        return self.events[idx]

    def _on_toggle(self, index: Optional[int], text: Optional[str]) -> State:
        ev = self._select(index)
        if ev is None:
            return State.EVENT_BROWSER
        blocked = self.config.toggle_blocked(ev.title)
        self.message = f"{'Blocked' if blocked else 'Unblocked'}: {ev.title}"
        return State.EVENT_BROWSER

    def _on_edit_notes(self, index: Optional[int], text: Optional[str]) -> State:
        ev = self._select(index)
        if ev is None:
            return State.EVENT_BROWSER
        self.note_draft = self.config.note_for(ev.title)
        return State.NOTE_INPUT

    def _on_back(self, index: Optional[int], text: Optional[str]) -> State:
        return State.MENU

    # ------------------------------------------------------------------
    # Note input
    # ------------------------------------------------------------------

    def _on_confirm_note(self, index: Optional[int], text: Optional[str]) -> State:
        ev = self.selected_event
        if ev is None:
            return State.EVENT_BROWSER
        value = self.note_draft if text is None else text
        self.config.set_note(ev.title, value)
        self.message = f"Notes updated: {ev.title}" if value.strip() else f"Notes removed: {ev.title}"
        self.note_draft = ""
        return State.EVENT_BROWSER

    def _on_cancel_note(self, index: Optional[int], text: Optional[str]) -> State:
        self.note_draft = ""
        return State.EVENT_BROWSER


_TRANSITIONS: dict[tuple[State, Action], Callable[[Session, Optional[int], Optional[str]], State]] = {
    (State.MENU, Action.SET_URL): Session._on_set_url,
    (State.MENU, Action.BROWSE): Session._on_browse,
    (State.MENU, Action.SAVE): Session._on_save,
    (State.MENU, Action.QUIT): Session._on_quit,
    (State.URL_INPUT, Action.CONFIRM): Session._on_confirm_url,
    (State.URL_INPUT, Action.CANCEL): Session._on_cancel_url,
    (State.EVENT_BROWSER, Action.TOGGLE): Session._on_toggle,
    (State.EVENT_BROWSER, Action.EDIT_NOTES): Session._on_edit_notes,
    (State.EVENT_BROWSER, Action.BACK): Session._on_back,
    (State.NOTE_INPUT, Action.CONFIRM): Session._on_confirm_note,
    (State.NOTE_INPUT, Action.CANCEL): Session._on_cancel_note,
}
