import sys
import os
import sqlite3
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime
import pytest

current_dir = os.path.dirname(os.path.abspath(__file__))
project_root = os.path.dirname(current_dir)
sys.path.insert(0, project_root)

from ruralgp_engine.usage_events import (
    EVENT_CALCULATOR_STARTED,
    EVENT_CALCULATOR_COMPLETED,
    init_events_table,
    get_events_connection,
    record_event,
    get_event_summary,
    calculate_completion_rate,
)


@pytest.fixture
def conn():
    connection = get_events_connection(":memory:")
    yield connection
    connection.close()


def _stats_by_type(summary):
    return {row["event_type"]: row for row in summary["stats"]}


def test_record_event_success(conn):
    result = record_event(conn, EVENT_CALCULATOR_STARTED, session_id="abc",
                          remoteness_tier="MMM 5", professional_status="VR GP")
    assert result == {"success": True}

    row = conn.execute("SELECT event_type, session_id, remoteness_tier, professional_status FROM calculator_events").fetchone()
    assert tuple(row) == (EVENT_CALCULATOR_STARTED, "abc", "MMM 5", "VR GP")


def test_record_event_blank_metadata_stored_as_null(conn):
    record_event(conn, EVENT_CALCULATOR_STARTED, session_id="", remoteness_tier="")
    row = conn.execute("SELECT session_id, remoteness_tier, professional_status FROM calculator_events").fetchone()
    assert tuple(row) == (None, None, None)


@pytest.mark.parametrize("event_type", ["", None])
def test_record_event_requires_event_type(conn, event_type):
    assert record_event(conn, event_type) == {"error": "event_type is required"}
    assert conn.execute("SELECT COUNT(*) FROM calculator_events").fetchone()[0] == 0


def test_record_event_database_failure(conn):
    conn.execute("DROP TABLE calculator_events")
    assert record_event(conn, EVENT_CALCULATOR_STARTED) == {"error": "Failed to log event"}


def test_init_events_table_is_idempotent(conn):
    record_event(conn, EVENT_CALCULATOR_STARTED, session_id="s1")
    init_events_table(conn)
    init_events_table(conn)
    assert conn.execute("SELECT COUNT(*) FROM calculator_events").fetchone()[0] == 1


def test_summary_counts_and_completion_rate(conn):
    for session in ["s1", "s2", "s3", "s4"]:
        record_event(conn, EVENT_CALCULATOR_STARTED, session_id=session)
    record_event(conn, EVENT_CALCULATOR_STARTED, session_id="s1")  # page reload
    for session in ["s1", "s2", "s3"]:
        record_event(conn, EVENT_CALCULATOR_COMPLETED, session_id=session)

    summary = get_event_summary(conn)
    stats = _stats_by_type(summary)

    assert stats[EVENT_CALCULATOR_STARTED]["count"] == 5
    assert stats[EVENT_CALCULATOR_STARTED]["unique_sessions"] == 4
    assert stats[EVENT_CALCULATOR_COMPLETED]["count"] == 3
    assert summary["completion_rate"] == 75
    assert len(summary["recent_events"]) == 8


def test_summary_recent_events_newest_first_and_limited(conn):
    for day in range(1, 6):
        record_event(conn, EVENT_CALCULATOR_STARTED, session_id=f"s{day}",
                     created_at=datetime(2024, 3, day, 9, 0, 0))

    summary = get_event_summary(conn, limit=3)
    recent = summary["recent_events"]
    assert [event["session_id"] for event in recent] == ["s5", "s4", "s3"]
    assert recent[0]["created_at"] == "2024-03-05 09:00:00"


def test_summary_end_date_is_inclusive(conn):
    record_event(conn, EVENT_CALCULATOR_STARTED, session_id="early", created_at=datetime(2024, 1, 31, 23, 0, 0))
    record_event(conn, EVENT_CALCULATOR_STARTED, session_id="first", created_at=datetime(2024, 2, 1, 0, 0, 0))
    record_event(conn, EVENT_CALCULATOR_STARTED, session_id="last", created_at=datetime(2024, 2, 29, 23, 59, 59))
    record_event(conn, EVENT_CALCULATOR_STARTED, session_id="late", created_at=datetime(2024, 3, 1, 0, 0, 0))

    summary = get_event_summary(conn, start_date="2024-02-01", end_date="2024-02-29")
    sessions = {event["session_id"] for event in summary["recent_events"]}
    assert sessions == {"first", "last"}
    assert _stats_by_type(summary)[EVENT_CALCULATOR_STARTED]["count"] == 2


def test_summary_accepts_date_objects(conn):
    record_event(conn, EVENT_CALCULATOR_COMPLETED, session_id="a", created_at=datetime(2024, 6, 15, 12, 0, 0))
    summary = get_event_summary(conn, start_date=date(2024, 6, 15), end_date=date(2024, 6, 15))
    assert len(summary["recent_events"]) == 1


def test_summary_open_ended_range(conn):
    record_event(conn, EVENT_CALCULATOR_STARTED, session_id="old", created_at=datetime(2023, 1, 1, 0, 0, 0))
    record_event(conn, EVENT_CALCULATOR_STARTED, session_id="new", created_at=datetime(2024, 1, 1, 0, 0, 0))

    summary = get_event_summary(conn, start_date="2023-06-01")
    assert [event["session_id"] for event in summary["recent_events"]] == ["new"]


def test_summary_empty_store(conn):
    summary = get_event_summary(conn)
    assert summary == {"stats": [], "completion_rate": 0, "recent_events": []}


def test_summary_invalid_date(conn):
    summary = get_event_summary(conn, start_date="01/02/2024")
    assert summary == {"error": "Invalid start date '01/02/2024'. Expected YYYY-MM-DD."}


def test_summary_start_after_end(conn):
    summary = get_event_summary(conn, start_date="2024-03-01", end_date="2024-02-01")
    assert summary == {"error": "Start date must be on or before end date."}


def test_summary_database_failure(conn):
    conn.execute("DROP TABLE calculator_events")
    assert get_event_summary(conn) == {"error": "Failed to fetch stats"}


def test_events_persist_across_connections(tmp_path):
    db_path = str(tmp_path / "events.db")
    first = get_events_connection(db_path)
    record_event(first, EVENT_CALCULATOR_STARTED, session_id="s1")
    first.close()

    second = get_events_connection(db_path)
    assert second.execute("SELECT COUNT(*) FROM calculator_events").fetchone()[0] == 1
    second.close()


@pytest.mark.parametrize("started, completed, expected", [
    (0, 0, 0),
    (0, 2, 0),
    (3, 1, 33),
    (3, 2, 67),
    (4, 4, 100),
])
def test_calculate_completion_rate(started, completed, expected):
    stats = [
        {"event_type": EVENT_CALCULATOR_STARTED, "count": started, "unique_sessions": started},
        {"event_type": EVENT_CALCULATOR_COMPLETED, "count": completed, "unique_sessions": completed},
    ]
    assert calculate_completion_rate(stats) == expected


def test_connection_rows_are_named(conn):
    record_event(conn, EVENT_CALCULATOR_STARTED, session_id="s1")
    row = conn.execute("SELECT session_id FROM calculator_events").fetchone()
    assert isinstance(row, sqlite3.Row)
    assert row["session_id"] == "s1"


def test_shared_connection_records_from_many_threads(tmp_path):
    shared = get_events_connection(str(tmp_path / "events.db"))

    def simulate_session(session_number):
        session_id = f"session-{session_number}"
        results = [record_event(shared, EVENT_CALCULATOR_STARTED, session_id=session_id)]
        results.append(record_event(shared, EVENT_CALCULATOR_COMPLETED, session_id=session_id))
        get_event_summary(shared)
        return results

    with ThreadPoolExecutor(max_workers=8) as pool:
        outcomes = [result for results in pool.map(simulate_session, range(40)) for result in results]

    assert all(outcome == {"success": True} for outcome in outcomes)
    assert shared.execute("SELECT COUNT(*) FROM calculator_events").fetchone()[0] == 80
    assert get_event_summary(shared)["completion_rate"] == 100
    shared.close()
