from pathlib import Path

import pytest

from attendance_bot.config import load_settings

ENV_VARS = ("DATABASE_PATH", "ATTENDANCE_TIMEZONE", "GOOGLE_CHAT_ATTENDANCE_WEBHOOK_URL", "API_KEY")


@pytest.fixture(autouse=True)
def clean_env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    # setenv first so values loaded from an env file are removed again afterwards
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


def test_defaults_when_unset():
    settings = load_settings()

    assert settings.database_path == Path("attendance_bot.db")
    assert settings.timezone.key == "Asia/Seoul"
    assert settings.chat_webhook_url is None
    assert settings.api_key is None


def test_reads_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "data" / "log.db"))
    monkeypatch.setenv("ATTENDANCE_TIMEZONE", "Europe/Berlin")
    monkeypatch.setenv("GOOGLE_CHAT_ATTENDANCE_WEBHOOK_URL", "https://chat.example/hook")
    monkeypatch.setenv("API_KEY", "secret")

    settings = load_settings()

    assert settings.database_path == tmp_path / "data" / "log.db"
    assert settings.timezone.key == "Europe/Berlin"
    assert settings.chat_webhook_url == "https://chat.example/hook"
    assert settings.api_key == "secret"


def test_reads_env_file(tmp_path):
    env_file = tmp_path / "bot.env"
    env_file.write_text("API_KEY=from-file\n", encoding="utf-8")

    assert load_settings(str(env_file)).api_key == "from-file"


def test_unknown_timezone_is_rejected(monkeypatch):
    monkeypatch.setenv("ATTENDANCE_TIMEZONE", "Mars/Olympus_Mons")

    with pytest.raises(RuntimeError, match="ATTENDANCE_TIMEZONE"):
        load_settings()
