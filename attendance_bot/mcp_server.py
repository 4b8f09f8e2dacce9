"""MCP server exposing attendance lookups as tools."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from mcp.server.fastmcp import FastMCP

from .config import load_settings
from .db import Database
from .service import AttendanceService

mcp = FastMCP("attendance-bot")

_service: Optional[AttendanceService] = None


def _get_service() -> AttendanceService:
    global _service
    if _service is None:
        settings = load_settings()
        _service = AttendanceService(settings, Database(settings.database_path))
    return _service


@mcp.tool()
async def get_today_attendance(user_id: str) -> dict:
    """Return today's attendance events, current state and working hours for a user."""

    return _get_service().get_today_report(user_id)


@mcp.tool()
async def get_working_hours(user_id: str, date: str) -> dict:
    """Return a user's attendance for the given YYYY-MM-DD date."""

    try:
        day = datetime.strptime(date, "%Y-%m-%d").date()
    except ValueError as exc:
        raise ValueError("Invalid date format. Use YYYY-MM-DD.") from exc
    return _get_service().get_day_report(user_id, day)


if __name__ == "__main__":  # pragma: no cover
    mcp.run()


__all__ = ["mcp", "get_today_attendance", "get_working_hours"]
