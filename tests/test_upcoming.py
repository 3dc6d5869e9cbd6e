"""
Unit tests for the upcoming-event index.

Rules:
- one entry per title: earliest start that is not before the cutoff
- optional horizon is exclusive
- missing start / empty title -> skipped
- ascending by start, stable for ties
"""

import unittest
from datetime import datetime, timedelta, timezone

from unical.model import EventRecord
from unical.upcoming import CutoffPolicy, cutoff_for, start_of_day, upcoming_events

NOW = datetime(2030, 5, 15, 14, 30, tzinfo=timezone.utc)


def _titles(events, cutoff, horizon=None) -> list:
    return [ev.title for ev in upcoming_events(events, cutoff, horizon)]


def _ev(title: str, start) -> EventRecord:
    return EventRecord(title=title, start=start)


class TestUpcoming(unittest.TestCase):
    def test_recurring_event_collapses_to_next_occurrence(self) -> None:
        tomorrow = NOW + timedelta(days=1)
        next_month = NOW + timedelta(days=31)
        events = [_ev("Math 101", next_month), _ev("Math 101", tomorrow)]

        out = upcoming_events(events, NOW)

        self.assertEqual(len(out), 1)
        self.assertEqual(out[0].title, "Math 101")
        self.assertEqual(out[0].start, tomorrow)

    def test_instance_before_cutoff_is_ignored(self) -> None:
        before = NOW - timedelta(days=2)
        after = NOW + timedelta(days=5)
        out = upcoming_events([_ev("Lab", before), _ev("Lab", after)], NOW)
        self.assertEqual([(e.title, e.start) for e in out], [("Lab", after)])

    def test_start_equal_to_cutoff_is_included(self) -> None:
        out = upcoming_events([_ev("Now", NOW)], NOW)
        self.assertEqual(len(out), 1)

    def test_sorted_by_start(self) -> None:
        events = [
            _ev("C", NOW + timedelta(hours=3)),
            _ev("A", NOW + timedelta(hours=1)),
            _ev("B", NOW + timedelta(hours=2)),
        ]
        self.assertEqual(_titles(events, NOW), ["A", "B", "C"])

    def test_ties_keep_encounter_order(self) -> None:
        t = NOW + timedelta(hours=1)
        events = [_ev("Second", t), _ev("First", t)]
        self.assertEqual(_titles(events, NOW), ["Second", "First"])

    def test_ties_use_position_of_kept_instance(self) -> None:
        t = NOW + timedelta(hours=1)
        # "A" is seen first, but its kept instance comes after "B"
        events = [_ev("A", NOW + timedelta(hours=5)), _ev("B", t), _ev("A", t)]
        out = upcoming_events(events, NOW)
        self.assertEqual([e.title for e in out], ["B", "A"])
        self.assertEqual(out[1].start, t)

    def test_missing_start_and_empty_title_are_skipped(self) -> None:
        events = [_ev("No start", None), _ev("", NOW + timedelta(hours=1)), _ev("Ok", NOW + timedelta(hours=2))]
        self.assertEqual(_titles(events, NOW), ["Ok"])

    def test_horizon_is_exclusive(self) -> None:
        horizon = NOW + timedelta(days=7)
        events = [
            _ev("In", NOW + timedelta(days=1)),
            _ev("Edge", horizon),
            _ev("Out", NOW + timedelta(days=8)),
        ]
        self.assertEqual(_titles(events, NOW, horizon), ["In"])

    def test_horizon_picks_earliest_inside_window(self) -> None:
        horizon = NOW + timedelta(days=7)
        events = [_ev("Lab", NOW + timedelta(days=9)), _ev("Lab", NOW + timedelta(days=2))]
        out = upcoming_events(events, NOW, horizon)
        self.assertEqual(out[0].start, NOW + timedelta(days=2))


class TestCutoffPolicy(unittest.TestCase):
    def test_start_of_day(self) -> None:
        self.assertEqual(start_of_day(NOW), datetime(2030, 5, 15, tzinfo=timezone.utc))

    def test_policies(self) -> None:
        self.assertEqual(cutoff_for(CutoffPolicy.NOW, NOW), NOW)
        self.assertEqual(cutoff_for(CutoffPolicy.START_OF_DAY, NOW), start_of_day(NOW))

    def test_today_cutoff_keeps_earlier_events_of_today(self) -> None:
        this_morning = NOW.replace(hour=8)
        events = [_ev("Morning", this_morning)]
        self.assertEqual(_titles(events, cutoff_for(CutoffPolicy.START_OF_DAY, NOW)), ["Morning"])
        self.assertEqual(_titles(events, cutoff_for(CutoffPolicy.NOW, NOW)), [])


if __name__ == "__main__":
    unittest.main()
