from __future__ import annotations

from pathlib import Path
from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from unical.session import Action, Session, State

console = Console()

MAX_URL_LEN = 50
MAX_NOTE_LEN = 30
MAX_DESC_LEN = 40
PREVIEW_BLOCKED = 3
PREVIEW_NOTES = 2


def _println(msg: str = "") -> None:
    console.print(msg)


def _prompt(msg: str) -> str:
    # prompts contain literal "[...]" hints, not markup
    return console.input(escape(msg))


def _shorten(text: str, max_len: int) -> str:
    text = " ".join(text.split())
    if len(text) > max_len:
        return text[: max_len - 1].rstrip() + "…"
    return text


def run(config_path: Optional[str | Path] = None) -> None:
    """
    Start the interactive configuration session for config_path.
    """
    run_interactive(Session.from_store(config_path))


def run_interactive(session: Session) -> None:
    """
    Interactive loop: render the current state, read one input, dispatch it.
    """
    while session.state is not State.DONE:
        _print_message(session)

        if session.state is State.MENU:
            _flow_menu(session)
        elif session.state is State.URL_INPUT:
            _flow_url_input(session)
        elif session.state is State.EVENT_BROWSER:
            _flow_browser(session)
        elif session.state is State.NOTE_INPUT:
            _flow_note_input(session)

    _println("Bye.")


def _print_message(session: Session) -> None:
    if session.message:
        _println(f"\n[green]ℹ {escape(session.message)}[/]")
        session.message = ""


def _print_header(session: Session) -> None:
    cfg = session.config
    _println("\n=== UniCal (interactive) ===")
    if cfg.origin_url:
        _println(f"URL: [italic]{escape(_shorten(cfg.origin_url, MAX_URL_LEN))}[/]")
    else:
        _println("URL: (no URL configured)")
    unsaved = " | [yellow]unsaved changes[/]" if session.dirty else ""
    _println(f"Blocked events: {len(cfg.blocklist)} | Events with notes: {len(cfg.notes)}{unsaved}")

    if cfg.blocklist:
        _println("\nBlocked events:")
        for title in cfg.blocklist[:PREVIEW_BLOCKED]:
            _println(f"  [red]✗[/] {escape(title)}")
        if len(cfg.blocklist) > PREVIEW_BLOCKED:
            _println(f"  ... +{len(cfg.blocklist) - PREVIEW_BLOCKED} more")

    if cfg.notes:
        _println("\nEvents with notes:")
        for key, note in list(cfg.notes.items())[:PREVIEW_NOTES]:
            _println(f"  {escape(key)}: [yellow]{escape(_shorten(note, MAX_NOTE_LEN))}[/]")
        if len(cfg.notes) > PREVIEW_NOTES:
            _println(f"  ... +{len(cfg.notes) - PREVIEW_NOTES} more")


def _flow_menu(session: Session) -> None:
    _print_header(session)

    choice = _prompt(
        "\n[1] Set iCal URL\n"
        "[2] Manage events & blocklist\n"
        "[3] Save configuration\n"
        "[0] Quit\n"
        "Select: "
    ).strip().lower()

    if choice == "1":
        session.dispatch(Action.SET_URL)
    elif choice == "2":
        _println("Fetching events from calendar...")
        session.dispatch(Action.BROWSE)
    elif choice == "3":
        session.dispatch(Action.SAVE)
    elif choice in ("0", "q"):
        if session.dirty:
            really = _prompt("You have unsaved changes. Quit anyway? [y/N]: ").strip().lower()
            if really != "y":
                return
        session.dispatch(Action.QUIT)
    else:
        session.message = "Invalid choice."


def _flow_url_input(session: Session) -> None:
    current = session.url_draft or "(none)"
    _println(f"\nCurrent URL: {escape(current)}")
    value = _prompt("Enter iCal URL [blank = cancel]: ").strip()
    if not value:
        session.dispatch(Action.CANCEL)
        return
    session.dispatch(Action.CONFIRM, text=value)


def _render_browser(session: Session) -> None:
    rows = session.rows()
    if not rows:
        _println("No upcoming events.")
        return

    table = Table(title="Upcoming events (✓ = kept, ✗ = blocked)", box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("")
    table.add_column("Start")
    table.add_column("Event")
    table.add_column("Description", style="dim")
    table.add_column("Note")
    for row in rows:
        status = "[red]✗[/]" if row.blocked else "[green]✓[/]"
        start = row.start.strftime("%Y-%m-%d %H:%M") if row.start else ""
        desc = escape(_shorten(row.description, MAX_DESC_LEN))
        note = f"[yellow]{escape(_shorten(row.note, MAX_NOTE_LEN))}[/]" if row.note else ""
        table.add_row(str(row.index + 1), status, start, escape(row.title), desc, note)
    console.print(table)


def _flow_browser(session: Session) -> None:
    _render_browser(session)

    pick = _prompt("Number to toggle, n<number> to edit notes [blank = back]: ").strip().lower()
    if not pick:
        session.dispatch(Action.BACK)
        return

    if pick.startswith("n"):
        num = pick[1:].strip()
        if not num.isdigit():
            session.message = "Not a number."
            return
        session.dispatch(Action.EDIT_NOTES, index=int(num) - 1)
        return

    if not pick.isdigit():
        session.message = "Not a number."
        return
    session.dispatch(Action.TOGGLE, index=int(pick) - 1)


def _flow_note_input(session: Session) -> None:
    ev = session.selected_event
    title = ev.title if ev is not None else ""
    _println(f"\nNotes for: [bold]{escape(title)}[/]")
    if session.note_draft:
        _println(f"Current: {escape(session.note_draft)}")

    value = _prompt("Enter notes ('-' = remove, blank = cancel): ").strip()
    if not value:
        session.dispatch(Action.CANCEL)
        return
    session.dispatch(Action.CONFIRM, text="" if value == "-" else value)
