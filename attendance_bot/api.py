"""FastAPI application exposing the attendance bot webhook."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from fastapi import BackgroundTasks, Body, Depends, FastAPI, Header, HTTPException, status

from .cards import FAILURE_TEXT, WELCOME_TEXT, text_message
from .chat_client import GoogleChatClient
from .config import Settings, load_settings
from .db import Database
from .schemas import ChatEvent
from .service import AttendanceService, parse_command

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()
    database = Database(settings.database_path)
    chat_client = GoogleChatClient(settings.chat_webhook_url) if settings.chat_webhook_url else None
    service = AttendanceService(settings, database, chat_client)

    async def verify_api_key(x_api_key: Optional[str] = Header(None, alias="X-API-Key")) -> None:
        if not settings.api_key:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="API key is not configured")
        if x_api_key != settings.api_key:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid api key")

    def parse_day(value: str) -> date:
        try:
            return datetime.strptime(value, "%Y-%m-%d").date()
        except ValueError as exc:
            raise HTTPException(status_code=400, detail="Invalid date format. Use YYYY-MM-DD") from exc

    app = FastAPI(title="Attendance Bot API", version="1.0.0")
    app.state.service = service

    @app.on_event("shutdown")
    async def shutdown_event() -> None:  # pragma: no cover - io bound
        if chat_client is not None:
            await chat_client.close()

    def get_service() -> AttendanceService:
        return service

    @app.get("/")
    async def index() -> Dict[str, Any]:
        return {
            "message": "Attendance Bot API",
            "endpoints": {"attendance": "POST /api/attendance/bot"},
        }

    @app.get("/healthz")
    async def healthcheck(svc: AttendanceService = Depends(get_service)) -> Dict[str, Any]:
        return {"status": "ok", "failed_writes": svc.failed_writes}

    @app.post("/api/attendance/bot")
    async def attendance_bot(
        background_tasks: BackgroundTasks,
        payload: Dict[str, Any] = Body(...),
        svc: AttendanceService = Depends(get_service),
    ) -> Dict[str, Any]:
        try:
            event = ChatEvent.model_validate(payload)

            if event.type == "ADDED_TO_SPACE":
                return text_message(WELCOME_TEXT)

            if event.type != "MESSAGE" or event.message is None:
                return {}

            command = parse_command(event.message.command_text)
            if command is None:
                return {}

            sender = event.message.sender
            result = svc.handle_command(command, sender.name, sender.display_name or sender.name)
            if result.pending_event is not None:
                background_tasks.add_task(svc.persist, result)
                background_tasks.add_task(svc.announce, result.reply)
            return result.reply
        except Exception:  # noqa: BLE001
            logger.exception("Failed to handle chat event")
            return text_message(FAILURE_TEXT)

    @app.get("/api/attendance/today")
    async def get_today_attendance(
        user: str,
        _: None = Depends(verify_api_key),
        svc: AttendanceService = Depends(get_service),
    ) -> Dict[str, Any]:
        return svc.get_today_report(user)

    @app.get("/api/attendance/days")
    async def get_attendance_days(
        user: str,
        start: str,
        end: str,
        _: None = Depends(verify_api_key),
        svc: AttendanceService = Depends(get_service),
    ) -> Dict[str, List[Dict[str, Any]]]:
        start_day, end_day = parse_day(start), parse_day(end)
        if end_day < start_day:
            raise HTTPException(status_code=400, detail="end must not be before start")
        return {"days": svc.get_days_summary(user, start_day, end_day)}

    return app


__all__ = ["create_app"]
