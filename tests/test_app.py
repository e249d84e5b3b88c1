"""
Application factory and lifespan tests.
"""

from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

from tests.conftest import make_settings
from gallery.main import create_app


def test_public_files_served_when_present(tmp_path):
    public = tmp_path / "public"
    public.mkdir()
    (public / "index.html").write_text("<h1>Gallery</h1>")

    with TestClient(create_app(make_settings(tmp_path))) as client:
        page = client.get("/")
        api = client.get("/api/categories")

    assert page.status_code == 200
    assert "Gallery" in page.text
    assert api.json() == []


def test_no_public_dir(tmp_path):
    with TestClient(create_app(make_settings(tmp_path))) as client:
        assert client.get("/").status_code == 404


def test_unknown_route_uses_error_body(tmp_path):
    with TestClient(create_app(make_settings(tmp_path))) as client:
        response = client.get("/api/nothing-here")
    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}


def test_keepalive_runs_for_app_lifetime(tmp_path):
    settings = make_settings(tmp_path, keepalive_enabled=True, keepalive_url="http://service.test/", port=4000)

    with patch("gallery.main.KeepAlive") as keepalive_cls:
        keepalive_cls.return_value.stop = AsyncMock()
        with TestClient(create_app(settings)):
            keepalive_cls.assert_called_once_with("http://service.test/", settings.keepalive_interval_seconds)
            keepalive_cls.return_value.start.assert_called_once()

    keepalive_cls.return_value.stop.assert_awaited_once()


def test_keepalive_url_defaults_to_own_port(tmp_path):
    settings = make_settings(tmp_path, port=4000)

    assert settings.resolved_keepalive_url == "http://localhost:4000"


def test_keepalive_disabled_by_default(tmp_path):
    with patch("gallery.main.KeepAlive") as keepalive_cls:
        with TestClient(create_app(make_settings(tmp_path))):
            pass

    keepalive_cls.assert_not_called()


def test_session_cookie_is_http_only(tmp_path):
    with TestClient(create_app(make_settings(tmp_path))) as client:
        client.post("/api/signup", json={"username": "alice", "password": "pw"})
        response = client.post("/api/login", json={"username": "alice", "password": "pw"})

    cookie = response.headers["set-cookie"].lower()
    assert cookie.startswith("gallery_session=")
    assert "httponly" in cookie
    assert "secure" not in cookie.replace("httponly", "")
