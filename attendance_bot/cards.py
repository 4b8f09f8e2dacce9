"""Google Chat reply payloads for attendance commands."""

from __future__ import annotations

from datetime import datetime, tzinfo
from enum import Enum
from typing import Any, Dict, List, Optional

from .models import EventKind, WorkingHours

Message = Dict[str, Any]

WELCOME_TEXT = (
    "Hello! I'm the attendance bot. 👋\n\n"
    "Available commands:\n"
    "• `/checkin` - check in for the day\n"
    "• `/checkout` - check out and see today's working hours\n"
    "• `/break` - start a break (use `/checkin` again to resume work)"
)
FAILURE_TEXT = "❌ Something went wrong while processing your request. Please try again shortly."


class ReplyKind(str, Enum):
    CHECK_IN = "check-in"
    CHECK_OUT = "check-out"
    BREAK_START = "break-start"
    BREAK_END = "break-end"


REPLY_BY_EVENT = {
    EventKind.CHECK_IN: ReplyKind.CHECK_IN,
    EventKind.CHECK_OUT: ReplyKind.CHECK_OUT,
    EventKind.BREAK_START: ReplyKind.BREAK_START,
    EventKind.BREAK_END: ReplyKind.BREAK_END,
}

# kind -> (title, subtitle, time label, closing line)
_CARD_TEXT = {
    ReplyKind.CHECK_IN: ("✅ Checked in!", "have a great day!", "Check-in time", "let's do this! 💪"),
    ReplyKind.CHECK_OUT: ("🔴 Checked out!", "thanks for your work today!", "Check-out time", "get some rest! 🌙"),
    ReplyKind.BREAK_START: ("⏸️ Break started", "take a breather!", "Break start time", "enjoy your break! ☕"),
    ReplyKind.BREAK_END: ("▶️ Back to work", "welcome back!", "Resume time", "keep it up! 💪"),
}


def text_message(text: str) -> Message:
    return {"text": text}


def rejection_message(reason: str) -> Message:
    return text_message(f"⚠️ Cannot do that: {reason}.")


def already_checked_in_message(user_name: str, checked_in_at: datetime, tz: tzinfo) -> Message:
    local = checked_in_at.astimezone(tz)
    return text_message(f"ℹ️ {user_name}, you are already checked in since {local:%H:%M}.")


def format_working_hours(working_hours: Optional[WorkingHours]) -> str:
    if working_hours is None:
        return "unavailable"
    return f"{working_hours.hours}h {working_hours.minutes}m"


def build_card(
    kind: ReplyKind,
    user_name: str,
    timestamp: datetime,
    tz: tzinfo,
    *,
    working_hours: Optional[WorkingHours] = None,
) -> Message:
    """Render a status card. ``working_hours`` is only shown on check-out."""

    title, subtitle, time_label, closing = _CARD_TEXT[kind]
    local = timestamp.astimezone(tz)

    widgets: List[Dict[str, Any]] = [
        {"textParagraph": {"text": f"🕐 <b>{time_label}</b><br>{local:%H:%M}"}},
        {"textParagraph": {"text": f"📅 <b>Date</b><br>{local:%A, %B} {local.day}, {local.year}"}},
    ]
    if kind is ReplyKind.CHECK_OUT:
        widgets.append(
            {"textParagraph": {"text": f"⏱️ <b>Working hours</b><br>{format_working_hours(working_hours)}"}}
        )
    widgets.append({"textParagraph": {"text": f"{user_name}, {closing}"}})

    return {
        "cards": [
            {
                "header": {"title": title, "subtitle": f"{user_name}, {subtitle}"},
                "sections": [{"widgets": widgets}],
            }
        ]
    }


__all__ = [
    "FAILURE_TEXT",
    "Message",
    "REPLY_BY_EVENT",
    "ReplyKind",
    "WELCOME_TEXT",
    "already_checked_in_message",
    "build_card",
    "format_working_hours",
    "rejection_message",
    "text_message",
]
