"""Tests for calendar views."""

from datetime import date, datetime

import pytest

from fitcal.core.availability import AvailabilityEngine
from fitcal.core.calendar import (
    CellKind,
    client_history,
    client_schedule,
    day_schedule,
    days_with_sessions,
    month_grid,
)


@pytest.fixture
def engine(store):
    return AvailabilityEngine(store)


class TestDaySchedule:
    def test_empty_day_is_all_free(self, store, engine, today):
        cells = day_schedule(store, engine, today)
        assert len(cells) == 20
        assert cells[0].kind == CellKind.FREE
        assert cells[0].durations == [60, 90, 120]
        # 19:30 can't fit even 60 minutes before close
        assert cells[-1].kind == CellKind.UNAVAILABLE

    def test_session_start_and_continuation(self, store, engine, make_client, make_session, at, today):
        client = make_client("Anna")
        session = make_session(at(11), duration=90, client=client)

        cells = {c.start: c for c in day_schedule(store, engine, today)}

        start = cells[at(11)]
        assert start.kind == CellKind.SESSION_START
        assert start.session == session
        assert start.client_name == "Anna"
        assert start.span == 3
        assert cells[at(11, 30)].kind == CellKind.CONTINUATION
        assert cells[at(12)].kind == CellKind.CONTINUATION
        assert cells[at(12, 30)].kind == CellKind.FREE

    def test_slot_before_session_limited(self, store, engine, make_session, at, today):
        make_session(at(11), duration=60)
        cells = {c.start: c for c in day_schedule(store, engine, today)}
        # 10:00 can hold 60 minutes (back-to-back) but not 90
        assert cells[at(10)].durations == [60]
        assert cells[at(10, 30)].kind == CellKind.UNAVAILABLE

    def test_format(self, store, engine, make_client, make_session, at, today):
        make_session(at(10), duration=90, client=make_client("Anna"))
        cells = day_schedule(store, engine, today)
        assert cells[0].format() == "10:00 - Anna (1.5 h)"
        assert cells[1].format() == "10:30   |"
        assert cells[3].format() == "11:30   free (60, 90, 120 min)"
        assert cells[-1].format() == "19:30   -"

    def test_other_days_ignored(self, store, engine, make_session, today):
        make_session(datetime(2025, 1, 16, 10, 0))
        cells = day_schedule(store, engine, today)
        assert all(c.kind != CellKind.SESSION_START for c in cells)


class TestMonth:
    def test_days_with_sessions(self, store, make_session):
        make_session(datetime(2025, 1, 15, 10, 0))
        make_session(datetime(2025, 1, 15, 14, 0))
        make_session(datetime(2025, 1, 20, 10, 0))
        make_session(datetime(2025, 2, 1, 10, 0))

        assert days_with_sessions(store.list_sessions(), 2025, 1) == {date(2025, 1, 15), date(2025, 1, 20)}

    def test_month_grid_monday_first(self):
        weeks = month_grid(2025, 1)
        # January 1st 2025 is a Wednesday
        assert weeks[0] == [None, None, date(2025, 1, 1), date(2025, 1, 2), date(2025, 1, 3), date(2025, 1, 4), date(2025, 1, 5)]
        assert weeks[-1][4] == date(2025, 1, 31)
        assert weeks[-1][5] is None
        assert all(len(week) == 7 for week in weeks)


class TestClientViews:
    @pytest.fixture
    def sessions(self, make_client, make_session):
        client = make_client()
        return [
            make_session(datetime(2025, 1, 10, 10, 0), client=client),
            make_session(datetime(2025, 1, 20, 10, 0), client=client),
            make_session(datetime(2025, 1, 12, 10, 0), client=client),
        ]

    def test_history_newest_first(self, sessions, at):
        history = client_history(sessions, at(12))
        assert [s.start.day for s in history] == [12, 10]

    def test_schedule_oldest_first_with_status(self, sessions, at):
        entries = client_schedule(sessions, at(12))
        assert [(e.session.start.day, e.status) for e in entries] == [
            (10, "past"),
            (12, "past"),
            (20, "upcoming"),
        ]
