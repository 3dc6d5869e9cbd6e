"""
Tests for CLI entry points.

These tests focus on:
- argument validation (date format, START/END given together)
- batch failures turning into a non-zero exit code
- successful runs with the network call stubbed out
"""

import io
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest import mock

from unical.cli import main
from unical.model import CalendarConfig
from unical.storage import save_config

ICS = (
    b"BEGIN:VCALENDAR\r\nVERSION:2.0\r\nPRODID:-//Test//EN\r\n"
    b"BEGIN:VEVENT\r\nUID:1@test\r\nDTSTART:20300101T090000Z\r\nSUMMARY:Seminar\r\nEND:VEVENT\r\n"
    b"BEGIN:VEVENT\r\nUID:2@test\r\nDTSTART:20300102T090000Z\r\nSUMMARY:Sports\r\nEND:VEVENT\r\n"
    b"END:VCALENDAR\r\n"
)


class TestCLI(unittest.TestCase):
    def test_cli_requires_command(self) -> None:
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                main([])
        self.assertNotEqual(ctx.exception.code, 0)

    def test_upcoming_rejects_bad_date(self) -> None:
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                main(["upcoming", "2030-13-01", "2030-01-02"])
        self.assertEqual(ctx.exception.code, 2)

    def test_upcoming_requires_both_dates(self) -> None:
        with redirect_stdout(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                main(["upcoming", "2030-01-01"])
        self.assertEqual(ctx.exception.code, 2)

    def test_run_without_url_fails_loudly(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            err = io.StringIO()
            with redirect_stderr(err):
                with self.assertRaises(SystemExit) as ctx:
                    main(["run", "--config", str(Path(d) / "missing.yaml"), "--output", str(Path(d) / "out.ics")])
            self.assertEqual(ctx.exception.code, 1)
            self.assertFalse((Path(d) / "out.ics").exists())

    @mock.patch("unical.fetch.requests.get")
    def test_run_writes_output(self, get: mock.Mock) -> None:
        get.return_value = mock.Mock(content=ICS)
        with tempfile.TemporaryDirectory() as d:
            cfg = Path(d) / "blocklist.yaml"
            out = Path(d) / "ical" / "filtered_calendar.ics"
            save_config(CalendarConfig(origin_url="https://example.com/cal.ics", blocklist=["Sports"]), cfg)

            with redirect_stderr(io.StringIO()), redirect_stdout(io.StringIO()) as stdout:
                with self.assertRaises(SystemExit) as ctx:
                    main(["run", "--config", str(cfg), "--output", str(out)])

            self.assertEqual(ctx.exception.code, 0)
            self.assertIn("Wrote 1 events", stdout.getvalue())
            text = out.read_text(encoding="utf-8")
            self.assertIn("SUMMARY:Seminar", text)
            self.assertNotIn("Sports", text)

    def test_upcoming_prints_titles(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            cfg = Path(d) / "blocklist.yaml"
            save_config(CalendarConfig(origin_url="https://example.com/cal.ics", blocklist=["Sports"]), cfg)

            with mock.patch("unical.fetch.requests.get") as get:
                get.return_value = mock.Mock(content=ICS)
                with redirect_stderr(io.StringIO()), redirect_stdout(io.StringIO()) as stdout:
                    with self.assertRaises(SystemExit) as ctx:
                        main(["upcoming", "2029-12-30", "2030-02-01", "--config", str(cfg)])

            self.assertEqual(ctx.exception.code, 0)
            text = stdout.getvalue()
            self.assertIn("Seminar", text)
            self.assertNotIn("Sports", text)


if __name__ == "__main__":
    unittest.main()
