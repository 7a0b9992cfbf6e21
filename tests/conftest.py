"""
Shared fixtures: storage backends, an isolated app per test, auth headers.
"""
import base64

import pytest
from fastapi.testclient import TestClient

from todoboard.app import create_app
from todoboard.config import Settings
from todoboard.storage import SQLiteStorage, JSONStorage

TEST_USERNAME = "testuser"
TEST_PASSWORD = "testpass123"
OTHER_USERNAME = "otheruser"
OTHER_PASSWORD = "otherpass123"


def basic_auth(username: str, password: str) -> dict:
    token = base64.b64encode(f"{username}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


def make_storage(backend: str, tmp_path):
    if backend == "sqlite":
        storage = SQLiteStorage(str(tmp_path / "todo.db"))
    else:
        storage = JSONStorage(str(tmp_path / "db.json"))
    storage.initialize()
    return storage


@pytest.fixture(params=["sqlite", "json"])
def backend(request):
    """Run the test once per storage backend."""
    return request.param


@pytest.fixture
def storage(backend, tmp_path):
    """An initialized, empty storage backend."""
    storage = make_storage(backend, tmp_path)
    yield storage
    storage.close()


@pytest.fixture
def user_id(storage):
    return storage.create_user("alice", "hash-a")


@pytest.fixture
def other_user_id(storage):
    return storage.create_user("bob", "hash-b")


@pytest.fixture
def settings(backend, tmp_path):
    return Settings(
        storage_backend=backend,
        db_path=str(tmp_path / "todo.db"),
        json_db_path=str(tmp_path / "db.json"),
        bcrypt_rounds=4,
    )


@pytest.fixture
def app(settings):
    """An app with its own storage, a test user and a second user."""
    app = create_app(settings, configure_logging=False)
    credentials = app.state.services.credentials
    credentials.create_user(TEST_USERNAME, TEST_PASSWORD)
    credentials.create_user(OTHER_USERNAME, OTHER_PASSWORD)
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def auth_header():
    return basic_auth(TEST_USERNAME, TEST_PASSWORD)


@pytest.fixture
def other_auth_header():
    return basic_auth(OTHER_USERNAME, OTHER_PASSWORD)


@pytest.fixture
def make_auth():
    """Build a Basic Authorization header for arbitrary credentials."""
    return basic_auth


@pytest.fixture
def storage_factory(tmp_path):
    """Open (or reopen) a backend on this test's temp directory."""
    def factory(backend: str):
        return make_storage(backend, tmp_path)
    return factory
