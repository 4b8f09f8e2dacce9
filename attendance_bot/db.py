"""SQLite persistence layer for the attendance log."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from typing import Dict, Iterator, List

from .models import AttendanceEvent, EventKind

Connection = sqlite3.Connection
Row = sqlite3.Row


class Database:
    """Append-only store of attendance events.

    Rows are never updated or deleted. ``UNIQUE(user_id, work_date, sequence)``
    serializes appends per user and day: an append made against a stale view
    of the day collides with the one that won and is ignored.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._initialize()

    @contextmanager
    def connect(self) -> Iterator[Connection]:
        conn = sqlite3.connect(self._path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def _initialize(self) -> None:
        with self.connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS attendance (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    user_name TEXT NOT NULL,
                    type TEXT NOT NULL,
                    timestamp TEXT NOT NULL,
                    ts REAL NOT NULL,
                    work_date TEXT NOT NULL,
                    sequence INTEGER NOT NULL,
                    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
                    UNIQUE(user_id, work_date, sequence)
                )
                """
            )
            conn.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_attendance_user_day
                ON attendance (user_id, work_date, ts)
                """
            )
            conn.commit()

    def append_event(self, event: AttendanceEvent, work_date: date, sequence: int) -> bool:
        """Append ``event`` at position ``sequence`` of the user's day.

        Returns ``False`` when another event already holds that position.
        """

        with self.connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO attendance (user_id, user_name, type, timestamp, ts, work_date, sequence)
                VALUES (:user_id, :user_name, :type, :timestamp, :ts, :work_date, :sequence)
                ON CONFLICT(user_id, work_date, sequence) DO NOTHING
                """,
                {
                    "user_id": event.user_id,
                    "user_name": event.user_name,
                    "type": event.kind.value,
                    "timestamp": event.timestamp.isoformat(),
                    "ts": event.timestamp.timestamp(),
                    "work_date": work_date.isoformat(),
                    "sequence": sequence,
                },
            )
            conn.commit()
            return cursor.rowcount == 1

    def fetch_daily_events(self, user_id: str, day: date) -> List[AttendanceEvent]:
        with self.connect() as conn:
            cursor = conn.execute(
                """
                SELECT * FROM attendance
                WHERE user_id = ? AND work_date = ?
                ORDER BY ts, sequence
                """,
                (user_id, day.isoformat()),
            )
            return [_to_event(row) for row in cursor.fetchall()]

    def fetch_user_days(self, user_id: str, start: date, end: date) -> Dict[date, List[AttendanceEvent]]:
        """Group the user's events between ``start`` and ``end`` (inclusive) by day."""

        with self.connect() as conn:
            cursor = conn.execute(
                """
                SELECT * FROM attendance
                WHERE user_id = ? AND work_date BETWEEN ? AND ?
                ORDER BY work_date, ts, sequence
                """,
                (user_id, start.isoformat(), end.isoformat()),
            )
            days: Dict[date, List[AttendanceEvent]] = {}
            for row in cursor.fetchall():
                day = date.fromisoformat(row["work_date"])
                days.setdefault(day, []).append(_to_event(row))
            return days


def _to_event(row: Row) -> AttendanceEvent:
    return AttendanceEvent(
        user_id=row["user_id"],
        user_name=row["user_name"],
        kind=EventKind(row["type"]),
        timestamp=datetime.fromisoformat(row["timestamp"]),
    )


__all__ = ["Database"]
