"""
Pytest configuration and fixtures for gallery tests.
"""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from gallery.core.config import Settings
from gallery.main import create_app

# Smallest thing that looks like a PNG to a reader; content is never decoded
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def make_settings(tmp_path, **overrides) -> Settings:
    values = {
        "database_url": "sqlite://",
        "session_secret": "test-secret",
        "storage_backend": "local",
        "upload_dir": str(tmp_path / "uploads"),
        "public_dir": str(tmp_path / "public"),
        "keepalive_enabled": False,
        "admin_username": None,
        "admin_password": None,
        "log_level": "WARNING",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def signup_and_login(client, username, password):
    client.post("/api/signup", json={"username": username, "password": password})
    response = client.post("/api/login", json={"username": username, "password": password})
    assert response.status_code == 200
    return response


def upload(client, content=PNG_BYTES, content_type="image/png", filename="cat.png", category_id="1"):
    data = {} if category_id is None else {"categoryId": category_id}
    return client.post(
        "/api/upload",
        files={"image": (filename, content, content_type)},
        data=data,
    )


@pytest.fixture
def settings(tmp_path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
def upload_dir(settings):
    return Path(settings.upload_dir)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_client(client):
    """Client logged in as the first (admin) user."""
    signup_and_login(client, "alice", "wonderland")
    return client


@pytest.fixture
def user_client(app, admin_client):
    """Second client on the same app, logged in as a regular user."""
    test_client = TestClient(app)
    signup_and_login(test_client, "bob", "builder123")
    yield test_client
    test_client.close()


@pytest.fixture
def anon_client(app):
    test_client = TestClient(app)
    yield test_client
    test_client.close()
