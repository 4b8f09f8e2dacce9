"""Dataclasses representing attendance domain models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class EventKind(str, Enum):
    """Kinds of entries stored in the attendance log."""

    CHECK_IN = "check-in"
    BREAK_START = "break-start"
    BREAK_END = "break-end"
    CHECK_OUT = "check-out"


class Command(str, Enum):
    """Slash commands a user can issue."""

    CHECK_IN = "check-in"
    BREAK_START = "break-start"
    CHECK_OUT = "check-out"


# break-end resumes work exactly like a check-in
RESUME_KINDS = frozenset({EventKind.CHECK_IN, EventKind.BREAK_END})
PAUSE_KINDS = frozenset({EventKind.BREAK_START, EventKind.CHECK_OUT})


@dataclass(frozen=True, slots=True)
class AttendanceEvent:
    user_id: str
    user_name: str
    kind: EventKind
    timestamp: datetime


@dataclass(frozen=True, slots=True)
class WorkingHours:
    hours: int
    minutes: int

    @classmethod
    def from_seconds(cls, seconds: int) -> "WorkingHours":
        total_minutes = seconds // 60
        return cls(hours=total_minutes // 60, minutes=total_minutes % 60)

    @property
    def total_minutes(self) -> int:
        return self.hours * 60 + self.minutes


__all__ = [
    "AttendanceEvent",
    "Command",
    "EventKind",
    "PAUSE_KINDS",
    "RESUME_KINDS",
    "WorkingHours",
]
