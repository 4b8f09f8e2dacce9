"""Core orchestration logic for the attendance bot."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

from .cards import (
    REPLY_BY_EVENT,
    Message,
    already_checked_in_message,
    build_card,
    rejection_message,
)
from .chat_client import GoogleChatClient, GoogleChatError
from .config import Settings
from .db import Database
from .hours import MalformedSequenceError, calculate_working_hours
from .models import AttendanceEvent, Command, EventKind, WorkingHours
from .state_machine import AttendanceState, Decision, decide, derive_state, order_events

logger = logging.getLogger(__name__)

COMMAND_ALIASES = {
    "/checkin": Command.CHECK_IN,
    "/check-in": Command.CHECK_IN,
    "/출근": Command.CHECK_IN,
    "/break": Command.BREAK_START,
    "/휴식": Command.BREAK_START,
    "/checkout": Command.CHECK_OUT,
    "/check-out": Command.CHECK_OUT,
    "/퇴근": Command.CHECK_OUT,
}

WriteFailureHook = Callable[[AttendanceEvent, BaseException], None]


def parse_command(text: str) -> Optional[Command]:
    """Map the first word of a message to a command, ignoring unknown text."""

    words = text.strip().split()
    if not words:
        return None
    return COMMAND_ALIASES.get(words[0].lower())


@dataclass(slots=True)
class CommandResult:
    """Reply to send right away plus the event still waiting to be stored."""

    reply: Message
    decision: Decision
    work_date: date
    sequence: int

    @property
    def pending_event(self) -> Optional[AttendanceEvent]:
        return self.decision.new_event


class AttendanceService:
    """Evaluates commands against the log and persists accepted events."""

    def __init__(
        self,
        settings: Settings,
        database: Database,
        chat_client: Optional[GoogleChatClient] = None,
    ) -> None:
        self.settings = settings
        self.database = database
        self.chat_client = chat_client
        self.failed_writes = 0
        self._write_failure_hooks: List[WriteFailureHook] = []

    def local_day(self, moment: datetime) -> date:
        return moment.astimezone(self.settings.timezone).date()

    # region Commands
    def handle_command(
        self,
        command: Command,
        user_id: str,
        user_name: str,
        now: Optional[datetime] = None,
    ) -> CommandResult:
        now = now or datetime.now(timezone.utc)
        day = self.local_day(now)
        events = order_events(self.database.fetch_daily_events(user_id, day))
        decision = decide(command, user_id, user_name, now, events)
        if decision.accepted:
            logger.info("%s from %s accepted in state %s", command.value, user_id, decision.state.value)
        else:
            logger.info("%s from %s rejected: %s", command.value, user_id, decision.reason)
        return CommandResult(
            reply=self._reply_for(decision, user_name, now, events),
            decision=decision,
            work_date=day,
            sequence=len(events),
        )

    def _reply_for(
        self,
        decision: Decision,
        user_name: str,
        now: datetime,
        events: Sequence[AttendanceEvent],
    ) -> Message:
        if not decision.accepted:
            return rejection_message(decision.reason or "invalid command")

        tz = self.settings.timezone
        event = decision.new_event
        if event is None:
            checked_in = next((e for e in events if e.kind is EventKind.CHECK_IN), events[-1])
            return already_checked_in_message(user_name, checked_in.timestamp, tz)

        working_hours = None
        if event.kind is EventKind.CHECK_OUT:
            working_hours = self.try_working_hours([*events, event])
        return build_card(REPLY_BY_EVENT[event.kind], user_name, now, tz, working_hours=working_hours)

    def try_working_hours(self, events: Sequence[AttendanceEvent]) -> Optional[WorkingHours]:
        """Calculate working hours, logging a corrupted log instead of raising."""

        try:
            return calculate_working_hours(events)
        except MalformedSequenceError:
            user_id = events[0].user_id if events else "unknown"
            logger.exception("Malformed attendance log for %s", user_id)
            return None

    # endregion

    # region Background work
    def add_write_failure_hook(self, hook: WriteFailureHook) -> None:
        self._write_failure_hooks.append(hook)

    def persist(self, result: CommandResult) -> bool:
        """Append the pending event. Runs after the reply has been sent."""

        event = result.pending_event
        if event is None:
            return False
        try:
            stored = self.database.append_event(event, result.work_date, result.sequence)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Failed to store %s for %s", event.kind.value, event.user_id)
            self._report_write_failure(event, exc)
            return False
        if not stored:
            logger.warning(
                "Dropped %s for %s: position %s on %s was already taken",
                event.kind.value,
                event.user_id,
                result.sequence,
                result.work_date.isoformat(),
            )
        return stored

    def _report_write_failure(self, event: AttendanceEvent, exc: BaseException) -> None:
        self.failed_writes += 1
        for hook in self._write_failure_hooks:
            try:
                hook(event, exc)
            except Exception:  # noqa: BLE001
                logger.exception("Write failure hook raised")

    async def announce(self, message: Message) -> None:
        if self.chat_client is None:
            return
        try:
            await self.chat_client.send_message(message)
        except GoogleChatError as exc:
            logger.error("Attendance announcement failed: %s", exc)

    # endregion

    # region Query helpers
    def get_day_report(self, user_id: str, day: date) -> Dict[str, Any]:
        events = order_events(self.database.fetch_daily_events(user_id, day))
        state = derive_state(events)
        report: Dict[str, Any] = {
            "user_id": user_id,
            "date": day.isoformat(),
            "state": state.value,
            "events": [_event_dict(event) for event in events],
            "working_hours": None,
        }
        if state is AttendanceState.FINISHED:
            report.update(_hours_fields(events))
        return report

    def get_today_report(self, user_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or datetime.now(timezone.utc)
        return self.get_day_report(user_id, self.local_day(now))

    def get_days_summary(self, user_id: str, start: date, end: date) -> List[Dict[str, Any]]:
        """Working hours per finished day, each day computed on its own."""

        summary: List[Dict[str, Any]] = []
        for day, events in sorted(self.database.fetch_user_days(user_id, start, end).items()):
            ordered = order_events(events)
            if derive_state(ordered) is not AttendanceState.FINISHED:
                continue
            summary.append({"date": day.isoformat(), **_hours_fields(ordered)})
        return summary

    # endregion


def _event_dict(event: AttendanceEvent) -> Dict[str, Any]:
    return {
        "user_id": event.user_id,
        "user_name": event.user_name,
        "type": event.kind.value,
        "timestamp": event.timestamp.isoformat(),
    }


def _hours_fields(events: Sequence[AttendanceEvent]) -> Dict[str, Any]:
    try:
        result = calculate_working_hours(events)
    except MalformedSequenceError as exc:
        logger.error("Malformed attendance log for %s: %s", events[0].user_id, exc)
        return {"working_hours": None, "error": str(exc)}
    return {"working_hours": {"hours": result.hours, "minutes": result.minutes}}


__all__ = ["AttendanceService", "COMMAND_ALIASES", "CommandResult", "parse_command"]
