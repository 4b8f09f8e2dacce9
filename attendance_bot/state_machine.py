"""Attendance state machine deciding the effect of an incoming command.

The current state is never stored. It is derived on demand from the last
event of the user's daily sequence, which keeps the append-only log the single
source of truth.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional

from .models import AttendanceEvent, Command, EventKind

NO_ACTIVE_SESSION = "no active session"
NO_CHECK_IN = "no check-in recorded"
ALREADY_ON_BREAK = "already on break"
ON_BREAK_AT_CHECK_OUT = "currently on break, resume work before checking out"
DAY_CLOSED = "day already closed"
ALREADY_CHECKED_OUT = "already checked out today"
CLOCK_SKEW = "the command time is earlier than your last recorded event"


class AttendanceState(str, Enum):
    NOT_STARTED = "not-started"
    WORKING = "working"
    ON_BREAK = "on-break"
    FINISHED = "finished"


class Outcome(str, Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass(frozen=True, slots=True)
class Decision:
    """Result of evaluating a command against the day's history."""

    outcome: Outcome
    state: AttendanceState
    new_event: Optional[AttendanceEvent] = None
    reason: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.outcome is Outcome.ACCEPTED

    @property
    def is_noop(self) -> bool:
        return self.accepted and self.new_event is None


_STATE_BY_KIND = {
    EventKind.CHECK_IN: AttendanceState.WORKING,
    EventKind.BREAK_END: AttendanceState.WORKING,
    EventKind.BREAK_START: AttendanceState.ON_BREAK,
    EventKind.CHECK_OUT: AttendanceState.FINISHED,
}

# (state, command) -> event kind to emit, None for an accepted no-op
_EMITS = {
    (AttendanceState.NOT_STARTED, Command.CHECK_IN): EventKind.CHECK_IN,
    (AttendanceState.WORKING, Command.CHECK_IN): None,
    (AttendanceState.WORKING, Command.BREAK_START): EventKind.BREAK_START,
    (AttendanceState.WORKING, Command.CHECK_OUT): EventKind.CHECK_OUT,
    (AttendanceState.ON_BREAK, Command.CHECK_IN): EventKind.BREAK_END,
}

_REJECTIONS = {
    (AttendanceState.NOT_STARTED, Command.BREAK_START): NO_ACTIVE_SESSION,
    (AttendanceState.NOT_STARTED, Command.CHECK_OUT): NO_CHECK_IN,
    (AttendanceState.ON_BREAK, Command.BREAK_START): ALREADY_ON_BREAK,
    (AttendanceState.ON_BREAK, Command.CHECK_OUT): ON_BREAK_AT_CHECK_OUT,
    (AttendanceState.FINISHED, Command.CHECK_IN): DAY_CLOSED,
    (AttendanceState.FINISHED, Command.BREAK_START): DAY_CLOSED,
    (AttendanceState.FINISHED, Command.CHECK_OUT): ALREADY_CHECKED_OUT,
}


def order_events(events: Iterable[AttendanceEvent]) -> List[AttendanceEvent]:
    """Return the events sorted by timestamp, keeping arrival order for ties."""

    return sorted(events, key=lambda event: event.timestamp)


def derive_state(events: Iterable[AttendanceEvent]) -> AttendanceState:
    ordered = order_events(events)
    if not ordered:
        return AttendanceState.NOT_STARTED
    return _STATE_BY_KIND[ordered[-1].kind]


def decide(
    command: Command,
    user_id: str,
    user_name: str,
    now: datetime,
    events: Iterable[AttendanceEvent],
) -> Decision:
    """Evaluate ``command`` against the user's events for the current day.

    Rejections are returned as regular decisions. Only a naive ``now`` raises.
    """

    if now.tzinfo is None or now.utcoffset() is None:
        raise ValueError("command timestamp must be timezone-aware")

    ordered = order_events(events)
    state = derive_state(ordered)
    key = (state, Command(command))

    reason = _REJECTIONS.get(key)
    if reason is not None:
        return Decision(outcome=Outcome.REJECTED, state=state, reason=reason)

    kind = _EMITS[key]
    if kind is None:
        return Decision(outcome=Outcome.ACCEPTED, state=state)

    # appends must keep the day ordered by timestamp
    if ordered and now < ordered[-1].timestamp:
        return Decision(outcome=Outcome.REJECTED, state=state, reason=CLOCK_SKEW)

    event = AttendanceEvent(user_id=user_id, user_name=user_name, kind=kind, timestamp=now)
    return Decision(outcome=Outcome.ACCEPTED, state=state, new_event=event)


__all__ = [
    "ALREADY_CHECKED_OUT",
    "ALREADY_ON_BREAK",
    "AttendanceState",
    "CLOCK_SKEW",
    "DAY_CLOSED",
    "Decision",
    "NO_ACTIVE_SESSION",
    "NO_CHECK_IN",
    "ON_BREAK_AT_CHECK_OUT",
    "Outcome",
    "decide",
    "derive_state",
    "order_events",
]
