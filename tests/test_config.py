import logging
from pathlib import Path

from sessiongate.config import INSECURE_SECRET, Settings

_VARS = (
    "PORT",
    "SESSIONGATE_PORT",
    "SESSION_SECRET",
    "SESSIONGATE_SECRET_KEY",
    "SESSIONGATE_DB_PATH",
    "SESSIONGATE_MIN_PASSWORD_LENGTH",
    "SESSIONGATE_ARGON2_TIME_COST",
    "SESSIONGATE_COOKIE_SECURE",
)


def _clear(monkeypatch):
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults(monkeypatch):
    _clear(monkeypatch)
    s = Settings.from_env()
    assert s.port == 3000
    assert s.secret_key == INSECURE_SECRET
    assert s.min_password_length == 6
    assert s.argon2_time_cost is None
    assert s.cookie_secure is False


def test_environment_overrides(monkeypatch, tmp_path):
    _clear(monkeypatch)
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("SESSION_SECRET", "s3cr3t")
    monkeypatch.setenv("SESSIONGATE_DB_PATH", str(tmp_path / "x.sqlite"))
    monkeypatch.setenv("SESSIONGATE_MIN_PASSWORD_LENGTH", "10")
    monkeypatch.setenv("SESSIONGATE_ARGON2_TIME_COST", "4")
    monkeypatch.setenv("SESSIONGATE_COOKIE_SECURE", "yes")

    s = Settings.from_env()
    assert s.port == 8080
    assert s.secret_key == "s3cr3t"
    assert s.db_path == Path(tmp_path / "x.sqlite").resolve()
    assert s.min_password_length == 10
    assert s.argon2_time_cost == 4
    assert s.cookie_secure is True


def test_prefixed_fallbacks(monkeypatch):
    _clear(monkeypatch)
    monkeypatch.setenv("SESSIONGATE_PORT", "9000")
    monkeypatch.setenv("SESSIONGATE_SECRET_KEY", "other")
    s = Settings.from_env()
    assert s.port == 9000
    assert s.secret_key == "other"


def test_from_env_does_not_log(monkeypatch, caplog):
    _clear(monkeypatch)
    with caplog.at_level(logging.DEBUG):
        Settings.from_env()
    assert caplog.records == []
