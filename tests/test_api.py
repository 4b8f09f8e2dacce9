import asyncio
from datetime import date

from attendance_bot import mcp_server
from attendance_bot.models import EventKind
from tests.helpers import API_KEY, chat_message


def test_index_lists_bot_endpoint(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json()["endpoints"]["attendance"] == "POST /api/attendance/bot"


def test_added_to_space_returns_welcome(client):
    resp = client.post("/api/attendance/bot", json={"type": "ADDED_TO_SPACE"})
    assert resp.status_code == 200
    assert "/checkin" in resp.json()["text"]


def test_unknown_text_and_events_return_empty(client):
    assert client.post("/api/attendance/bot", json=chat_message("hello")).json() == {}
    assert client.post("/api/attendance/bot", json={"type": "REMOVED_FROM_SPACE"}).json() == {}


def test_check_in_replies_with_card_and_persists(client, app):
    resp = client.post("/api/attendance/bot", json=chat_message("/출근"))

    assert resp.status_code == 200
    card = resp.json()["cards"][0]
    assert card["header"]["title"] == "✅ Checked in!"
    assert card["header"]["subtitle"].startswith("Kim")

    service = app.state.service
    today = service.get_today_report("users/1")
    assert [e["type"] for e in today["events"]] == ["check-in"]
    assert today["state"] == "working"


def test_slash_command_name_takes_precedence(client, app):
    payload = chat_message("")
    payload["message"]["slashCommand"] = {"commandId": "2", "commandName": "/break"}

    client.post("/api/attendance/bot", json=chat_message("/checkin"))
    resp = client.post("/api/attendance/bot", json=payload)

    assert resp.json()["cards"][0]["header"]["title"] == "⏸️ Break started"


def test_check_out_without_check_in_is_rejected(client, app):
    resp = client.post("/api/attendance/bot", json=chat_message("/checkout"))

    assert resp.status_code == 200
    assert "no check-in recorded" in resp.json()["text"]
    assert app.state.service.get_today_report("users/1")["events"] == []


def test_check_out_on_break_is_rejected(client):
    client.post("/api/attendance/bot", json=chat_message("/checkin"))
    client.post("/api/attendance/bot", json=chat_message("/break"))

    resp = client.post("/api/attendance/bot", json=chat_message("/checkout"))
    assert "resume work before checking out" in resp.json()["text"]


def test_resume_after_break_sends_back_to_work_card(client, app):
    client.post("/api/attendance/bot", json=chat_message("/checkin"))
    client.post("/api/attendance/bot", json=chat_message("/break"))
    resp = client.post("/api/attendance/bot", json=chat_message("/checkin"))

    assert resp.json()["cards"][0]["header"]["title"] == "▶️ Back to work"
    events = app.state.service.get_today_report("users/1")["events"]
    assert [e["type"] for e in events] == [
        EventKind.CHECK_IN.value,
        EventKind.BREAK_START.value,
        EventKind.BREAK_END.value,
    ]


def test_storage_failure_returns_generic_reply(client, app, monkeypatch):
    def broken_fetch(*args, **kwargs):
        raise RuntimeError("storage offline")

    monkeypatch.setattr(app.state.service.database, "fetch_daily_events", broken_fetch)

    resp = client.post("/api/attendance/bot", json=chat_message("/checkin"))
    assert resp.status_code == 200
    assert "Something went wrong" in resp.json()["text"]


def test_failed_background_write_shows_on_healthz(client, app, monkeypatch):
    def broken_append(*args, **kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(app.state.service.database, "append_event", broken_append)

    resp = client.post("/api/attendance/bot", json=chat_message("/checkin"))
    assert resp.json()["cards"][0]["header"]["title"] == "✅ Checked in!"
    assert client.get("/healthz").json() == {"status": "ok", "failed_writes": 1}


def test_reporting_requires_api_key(client):
    assert client.get("/api/attendance/today", params={"user": "users/1"}).status_code == 401
    resp = client.get(
        "/api/attendance/today",
        params={"user": "users/1"},
        headers={"X-API-Key": API_KEY},
    )
    assert resp.status_code == 200
    assert resp.json()["state"] == "not-started"


def test_days_endpoint_validates_dates(client):
    headers = {"X-API-Key": API_KEY}
    bad = client.get(
        "/api/attendance/days",
        params={"user": "users/1", "start": "03-01-2025", "end": "2025-03-31"},
        headers=headers,
    )
    assert bad.status_code == 400

    ok = client.get(
        "/api/attendance/days",
        params={"user": "users/1", "start": "2025-03-01", "end": "2025-03-31"},
        headers=headers,
    )
    assert ok.status_code == 200
    assert ok.json() == {"days": []}


def test_mcp_tools_use_service(service, monkeypatch):
    monkeypatch.setattr(mcp_server, "_service", service)

    report = asyncio.run(mcp_server.get_working_hours("users/1", "2025-03-03"))
    assert report["date"] == "2025-03-03"
    assert report["state"] == "not-started"

    today = asyncio.run(mcp_server.get_today_attendance("users/1"))
    assert today["events"] == []
    assert date.fromisoformat(today["date"])
