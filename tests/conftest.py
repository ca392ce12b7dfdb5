import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from sessiongate.app import create_app
from sessiongate.auth.passwords import PasswordService
from sessiongate.auth.session import InMemorySessionStore
from sessiongate.config import Settings


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """
    Settings pointing at a throwaway SQLite file, with argon2 costs turned
    down so hashing does not dominate the test run.
    """
    return Settings(
        secret_key="test-secret",
        db_path=tmp_path / "data" / "db.sqlite",
        argon2_time_cost=1,
        argon2_memory_cost=8,
        argon2_parallelism=1,
    )


@pytest.fixture()
def passwords() -> PasswordService:
    return PasswordService(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture()
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture()
def client(settings: Settings, session_store: InMemorySessionStore):
    app = create_app(settings, session_store=session_store)
    with TestClient(app, follow_redirects=False) as c:
        yield c
