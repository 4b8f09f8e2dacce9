"""Working-hours calculation over a finished daily event sequence."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from .models import PAUSE_KINDS, RESUME_KINDS, AttendanceEvent, EventKind, WorkingHours


class MalformedSequenceError(ValueError):
    """Raised when the persisted log cannot describe a valid working day."""


def calculate_working_hours(events: Sequence[AttendanceEvent]) -> WorkingHours:
    """Sum the working intervals of a day that ends with a check-out.

    Each resume-type event (check-in, break-end) opens a working interval that
    the next pause-type event (break-start, check-out) closes. Time between a
    break-start and the following resume is never counted. Events are read in
    the order given; an interval whose end precedes its start is an error.
    """

    if not events:
        raise MalformedSequenceError("no events recorded for the day")
    if events[-1].kind is not EventKind.CHECK_OUT:
        raise MalformedSequenceError("sequence does not end with a check-out")

    total_seconds = 0
    opened_at: Optional[datetime] = None
    closed = False

    for event in events:
        if event.timestamp.tzinfo is None:
            raise MalformedSequenceError(f"naive timestamp on {event.kind.value} event")
        if closed:
            raise MalformedSequenceError(f"{event.kind.value} recorded after check-out")

        if event.kind in RESUME_KINDS:
            if opened_at is not None:
                raise MalformedSequenceError(f"{event.kind.value} while already working")
            opened_at = event.timestamp
        elif event.kind in PAUSE_KINDS:
            if opened_at is None:
                if event.kind is EventKind.CHECK_OUT:
                    raise MalformedSequenceError("check-out without an open working interval")
                raise MalformedSequenceError("break-start without an open working interval")
            elapsed = event.timestamp - opened_at
            if elapsed.total_seconds() < 0:
                raise MalformedSequenceError(
                    f"{event.kind.value} at {event.timestamp.isoformat()} precedes "
                    f"interval start {opened_at.isoformat()}"
                )
            total_seconds += int(elapsed.total_seconds())
            opened_at = None
            closed = event.kind is EventKind.CHECK_OUT

    return WorkingHours.from_seconds(total_seconds)


__all__ = ["MalformedSequenceError", "calculate_working_hours"]
