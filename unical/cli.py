"""
CLI (Command Line Interface).

    unical run [--config PATH] [--output PATH]     filter the feed into ical/filtered_calendar.ics
    unical configure [--config PATH]               interactive blocklist / notes editor
    unical upcoming [START END] [--config PATH]    list distinct upcoming events (YYYY-MM-DD window)

Batch commands fail loudly: any UnicalError is logged and the exit code is 1.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import date

from unical.errors import UnicalError
from unical.runner import DEFAULT_OUTPUT, parse_day, run_filter, run_upcoming

logger = logging.getLogger("unical")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """
    Configure the 'unical' logger: one stderr handler.
    """
    root = logging.getLogger("unical")
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def _day(value: str) -> date:
    try:
        return parse_day(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYY-MM-DD")


def _cmd_run(args: argparse.Namespace) -> int:
    try:
        result = run_filter(args.config, args.output)
    except UnicalError as exc:
        logger.error("Filtering failed: %s", exc)
        return 1
    print(f"Wrote {len(result.events)} events to: {args.output}")
    return 0


def _cmd_upcoming(args: argparse.Namespace) -> int:
    if (args.start is None) != (args.end is None):
        print("Please provide both START and END dates (or neither).")
        return 2

    try:
        events = run_upcoming(args.config, args.start, args.end)
    except UnicalError as exc:
        logger.error("Listing upcoming events failed: %s", exc)
        return 1

    if not events:
        print("No upcoming events.")
        return 0
    for ev in events:
        print(f"{ev.start:%Y-%m-%d %H:%M} | {ev.title}")
    return 0


def _cmd_configure(args: argparse.Namespace) -> int:
    from unical.interactive import run

    run(args.config)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="unical", description="Filter and annotate an iCal feed")
    parser.add_argument(
        "--log-level",
        default=os.environ.get("UNICAL_LOG_LEVEL", "INFO"),
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_run = sub.add_parser("run", help="Fetch, filter and write the filtered calendar")
    p_run.add_argument("--config", type=str, default=None, help="Config file (default: config/blocklist.yaml)")
    p_run.add_argument("--output", type=str, default=str(DEFAULT_OUTPUT), help="Output .ics path")

    p_conf = sub.add_parser("configure", help="Interactive blocklist and notes editor")
    p_conf.add_argument("--config", type=str, default=None, help="Config file (default: config/blocklist.yaml)")

    p_up = sub.add_parser("upcoming", help="List distinct upcoming events (default: next 7 days)")
    p_up.add_argument("start", nargs="?", type=_day, default=None, help="Window start (YYYY-MM-DD)")
    p_up.add_argument("end", nargs="?", type=_day, default=None, help="Window end, exclusive (YYYY-MM-DD)")
    p_up.add_argument("--config", type=str, default=None, help="Config file (default: config/blocklist.yaml)")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    if args.command == "run":
        raise SystemExit(_cmd_run(args))
    if args.command == "upcoming":
        raise SystemExit(_cmd_upcoming(args))
    if args.command == "configure":
        raise SystemExit(_cmd_configure(args))

    raise SystemExit(2)
