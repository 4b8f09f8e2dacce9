from datetime import datetime
from zoneinfo import ZoneInfo

from attendance_bot.models import AttendanceEvent, EventKind

SEOUL = ZoneInfo("Asia/Seoul")
API_KEY = "test-key"


def at(hour: int, minute: int = 0, second: int = 0, day: int = 3) -> datetime:
    return datetime(2025, 3, day, hour, minute, second, tzinfo=SEOUL)


def make_event(kind: EventKind, when: datetime, user_id: str = "users/1") -> AttendanceEvent:
    return AttendanceEvent(user_id=user_id, user_name="Kim", kind=kind, timestamp=when)


def chat_message(text: str, user_id: str = "users/1", display_name: str = "Kim") -> dict:
    return {
        "type": "MESSAGE",
        "message": {
            "text": text,
            "sender": {"name": user_id, "displayName": display_name},
        },
    }
