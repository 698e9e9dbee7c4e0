import logging
import sqlite3
import threading
from datetime import date, datetime, timedelta, timezone

# --- Simplified and Concise Logging Setup ---
LOG_FORMAT = '%(asctime)s - %(levelname)s - [%(name)s] - %(message)s'
logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
events_logger = logging.getLogger('usage_events')

EVENT_CALCULATOR_STARTED = "calculator_started"
EVENT_CALCULATOR_COMPLETED = "calculator_completed"

RECENT_EVENTS_LIMIT = 50
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# One connection is shared by every Streamlit session thread
_db_lock = threading.Lock()


def init_events_table(conn: sqlite3.Connection) -> None:
    """Creates the events table if it does not exist. Safe to call on every connection."""
    with _db_lock:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS calculator_events (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                event_type TEXT NOT NULL,
                session_id TEXT,
                remoteness_tier TEXT,
                professional_status TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_calculator_events_created
            ON calculator_events(created_at)
        """)
        conn.commit()


def get_events_connection(db_path: str) -> sqlite3.Connection:
    """Opens the events database and makes sure the table exists."""
    conn = sqlite3.connect(db_path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    init_events_table(conn)
    events_logger.info(f"Usage events store ready at {db_path}")
    return conn


def record_event(conn: sqlite3.Connection,
                 event_type: str,
                 session_id: str = None,
                 remoteness_tier: str = None,
                 professional_status: str = None,
                 created_at: datetime = None) -> dict:
    """
    Appends one usage event. Optional metadata is stored as NULL when blank.

    Returns {"success": True} or {"error": message}.
    """
    if not event_type:
        return {"error": "event_type is required"}

    timestamp = (created_at or datetime.now(timezone.utc)).strftime(TIMESTAMP_FORMAT)
    try:
        with _db_lock:
            conn.execute(
                """
                INSERT INTO calculator_events (event_type, session_id, remoteness_tier, professional_status, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (event_type, session_id or None, remoteness_tier or None, professional_status or None, timestamp),
            )
            conn.commit()
    except sqlite3.Error as e:
        events_logger.error(f"Failed to log event '{event_type}': {e}")
        return {"error": "Failed to log event"}

    events_logger.info(f"Recorded event '{event_type}' for session {session_id}")
    return {"success": True}


def _parse_day(value, label: str):
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise ValueError(f"Invalid {label} '{value}'. Expected YYYY-MM-DD.")


def _date_filter_clause(start_date, end_date):
    """SQL WHERE clause and params for an inclusive calendar-day range."""
    clauses, params = [], []
    if start_date is not None:
        clauses.append("created_at >= ?")
        params.append(datetime.combine(start_date, datetime.min.time()).strftime(TIMESTAMP_FORMAT))
    if end_date is not None:
        # The end day counts through to midnight
        clauses.append("created_at < ?")
        params.append(datetime.combine(end_date + timedelta(days=1), datetime.min.time()).strftime(TIMESTAMP_FORMAT))
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    return where, params


def get_event_summary(conn: sqlite3.Connection,
                      start_date=None,
                      end_date=None,
                      limit: int = RECENT_EVENTS_LIMIT) -> dict:
    """
    Aggregate counts and recent events, optionally limited to a date range.

    Returns:
        {
            "stats": [{"event_type", "count", "unique_sessions"}, ...],
            "completion_rate": int percentage of started sessions that completed,
            "recent_events": newest-first list of event dicts,
        }
        or {"error": message}.
    """
    try:
        start = _parse_day(start_date, "start date")
        end = _parse_day(end_date, "end date")
    except ValueError as e:
        return {"error": str(e)}
    if start and end and start > end:
        return {"error": "Start date must be on or before end date."}

    where, params = _date_filter_clause(start, end)
    try:
        with _db_lock:
            stats_rows = conn.execute(
                f"""
                SELECT event_type,
                       COUNT(*) AS count,
                       COUNT(DISTINCT session_id) AS unique_sessions
                FROM calculator_events
                {where}
                GROUP BY event_type
                ORDER BY event_type
                """,
                params,
            ).fetchall()

            recent_rows = conn.execute(
                f"""
                SELECT id, event_type, session_id, remoteness_tier, professional_status, created_at
                FROM calculator_events
                {where}
                ORDER BY created_at DESC, id DESC
                LIMIT ?
                """,
                params + [limit],
            ).fetchall()
    except sqlite3.Error as e:
        events_logger.error(f"Failed to fetch event summary: {e}")
        return {"error": "Failed to fetch stats"}

    stats = [
        {"event_type": row[0], "count": row[1], "unique_sessions": row[2]}
        for row in stats_rows
    ]
    columns = ["id", "event_type", "session_id", "remoteness_tier", "professional_status", "created_at"]
    recent_events = [dict(zip(columns, row)) for row in recent_rows]

    return {
        "stats": stats,
        "completion_rate": calculate_completion_rate(stats),
        "recent_events": recent_events,
    }


def calculate_completion_rate(stats: list) -> int:
    """Completed sessions as a whole percentage of started sessions."""
    unique_by_type = {row["event_type"]: row["unique_sessions"] for row in stats}
    started = unique_by_type.get(EVENT_CALCULATOR_STARTED, 0)
    completed = unique_by_type.get(EVENT_CALCULATOR_COMPLETED, 0)
    if started == 0:
        return 0
    return round(completed / started * 100)
