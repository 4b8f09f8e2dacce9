import pytest
from fastapi.testclient import TestClient

from attendance_bot.api import create_app
from attendance_bot.config import Settings
from attendance_bot.db import Database
from attendance_bot.service import AttendanceService
from tests.helpers import API_KEY, SEOUL


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_path=tmp_path / "attendance.db",
        timezone=SEOUL,
        chat_webhook_url=None,
        api_key=API_KEY,
    )


@pytest.fixture
def database(settings):
    return Database(settings.database_path)


@pytest.fixture
def service(settings, database):
    return AttendanceService(settings, database)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    return TestClient(app)
