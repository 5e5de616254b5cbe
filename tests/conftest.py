import itertools
from datetime import date
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from usher.server.config import Settings
from usher.server.db import Database, db_proxy
from usher.server.init import migrate_database
from usher.server.server import create_app
from usher.server.services import UserService
from usher.server.store import MemoryUserStore


def sequential_tokens():
    """Token factory handing out T1, T2, ..."""
    counter = itertools.count(1)
    return lambda: f"T{next(counter)}"


@pytest.fixture()
def sqlite_store(tmp_path: Path):
    db = Database(str(tmp_path / "usher.sqlite3"))
    migrate_database()
    yield db
    db_proxy.close()


@pytest.fixture(params=["memory", "sqlite"])
def store(request):
    if request.param == "memory":
        return MemoryUserStore()
    return request.getfixturevalue("sqlite_store")


@pytest.fixture()
def service(store) -> UserService:
    return UserService(store, token_factory=sequential_tokens(), today=lambda: date(2025, 3, 3))


@pytest.fixture()
def client() -> TestClient:
    app = create_app(Settings(store_backend="memory"))
    with TestClient(app) as test_client:
        yield test_client
