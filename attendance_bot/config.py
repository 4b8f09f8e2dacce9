"""Configuration helpers for the attendance bot."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "Asia/Seoul"


@dataclass(slots=True)
class Settings:
    """Runtime configuration values loaded from environment variables."""

    database_path: Path
    timezone: ZoneInfo
    chat_webhook_url: Optional[str] = None
    api_key: Optional[str] = None


def load_settings(env_file: str | None = None) -> Settings:
    """Load settings from the environment, optionally from a specific file."""

    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    db_path = Path(os.getenv("DATABASE_PATH", "attendance_bot.db")).expanduser()

    tz_name = os.getenv("ATTENDANCE_TIMEZONE", DEFAULT_TIMEZONE)
    try:
        tz = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise RuntimeError(f"ATTENDANCE_TIMEZONE is not a known timezone: {tz_name}") from exc

    webhook_url = os.getenv("GOOGLE_CHAT_ATTENDANCE_WEBHOOK_URL") or None
    api_key = os.getenv("API_KEY") or None

    if not webhook_url:
        logger.warning(
            "GOOGLE_CHAT_ATTENDANCE_WEBHOOK_URL is not set. Attendance announcements are disabled."
        )
    if not api_key:
        logger.warning("API_KEY is not set. Reporting endpoints will reject every request.")

    return Settings(
        database_path=db_path,
        timezone=tz,
        chat_webhook_url=webhook_url,
        api_key=api_key,
    )


__all__ = ["Settings", "load_settings"]
