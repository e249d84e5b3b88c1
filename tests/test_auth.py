"""
Signup, login, logout and session-state tests.
"""

from fastapi.testclient import TestClient

from tests.conftest import make_settings, signup_and_login
from gallery.main import create_app


class TestSignup:

    def test_first_user_is_admin(self, client):
        first = client.post("/api/signup", json={"username": "alice", "password": "pw1"})
        second = client.post("/api/signup", json={"username": "bob", "password": "pw2"})
        third = client.post("/api/signup", json={"username": "carol", "password": "pw3"})

        assert first.status_code == 200
        assert first.json() == {"message": "User created successfully", "isAdmin": True}
        assert second.json()["isAdmin"] is False
        assert third.json()["isAdmin"] is False

    def test_duplicate_username_rejected(self, client):
        client.post("/api/signup", json={"username": "alice", "password": "pw1"})

        response = client.post("/api/signup", json={"username": "alice", "password": "different"})

        assert response.status_code == 400
        assert response.json() == {"error": "Username already exists"}

    def test_failed_duplicate_does_not_consume_admin(self, client):
        client.post("/api/signup", json={"username": "alice", "password": "pw1"})
        client.post("/api/signup", json={"username": "alice", "password": "pw2"})

        response = client.post("/api/signup", json={"username": "bob", "password": "pw3"})
        assert response.json()["isAdmin"] is False

    def test_missing_fields_rejected(self, client):
        assert client.post("/api/signup", json={"username": "alice"}).status_code == 400
        assert client.post("/api/signup", json={"password": "pw"}).status_code == 400
        assert client.post("/api/signup", json={"username": "   ", "password": "pw"}).status_code == 400

    def test_invalid_input_does_not_consume_admin(self, client):
        client.post("/api/signup", json={"username": "", "password": "pw"})

        response = client.post("/api/signup", json={"username": "alice", "password": "pw"})
        assert response.json()["isAdmin"] is True

    def test_malformed_body_is_bad_request(self, client):
        response = client.post("/api/signup", json={"username": {"nested": 1}, "password": "pw"})

        assert response.status_code == 400
        assert "error" in response.json()


class TestLogin:

    def test_login_success(self, client):
        client.post("/api/signup", json={"username": "alice", "password": "wonderland"})

        response = client.post("/api/login", json={"username": "alice", "password": "wonderland"})

        assert response.status_code == 200
        assert response.json() == {
            "message": "Login successful",
            "isAdmin": True,
            "username": "alice",
        }

    def test_wrong_password_and_unknown_user_look_the_same(self, client):
        client.post("/api/signup", json={"username": "alice", "password": "wonderland"})

        wrong = client.post("/api/login", json={"username": "alice", "password": "nope"})
        unknown = client.post("/api/login", json={"username": "mallory", "password": "wonderland"})

        assert wrong.status_code == 401
        assert unknown.status_code == 401
        assert wrong.json() == unknown.json() == {"error": "Invalid credentials"}

    def test_failed_login_leaves_client_anonymous(self, client):
        client.post("/api/signup", json={"username": "alice", "password": "wonderland"})
        client.post("/api/login", json={"username": "alice", "password": "nope"})

        assert client.get("/api/check-auth").json() == {"authenticated": False}


class TestSessionState:

    def test_check_auth_anonymous(self, anon_client):
        assert anon_client.get("/api/check-auth").json() == {"authenticated": False}

    def test_check_auth_after_login(self, admin_client):
        response = admin_client.get("/api/check-auth")

        assert response.json() == {"authenticated": True, "isAdmin": True, "username": "alice"}

    def test_regular_user_session_is_not_admin(self, user_client):
        response = user_client.get("/api/check-auth")

        assert response.json() == {"authenticated": True, "isAdmin": False, "username": "bob"}

    def test_logout_returns_to_anonymous(self, admin_client):
        response = admin_client.post("/api/logout")

        assert response.status_code == 200
        assert response.json() == {"message": "Logged out successfully"}
        assert admin_client.get("/api/check-auth").json() == {"authenticated": False}

    def test_logout_discards_server_state(self, app, admin_client):
        cookie_name = app.state.settings.session_cookie_name
        old_cookie = admin_client.cookies.get(cookie_name)
        assert old_cookie

        admin_client.post("/api/logout")

        # Replaying the old signed cookie must not log anyone back in
        replay = TestClient(app)
        replay.cookies.set(cookie_name, old_cookie)
        assert replay.get("/api/check-auth").json() == {"authenticated": False}
        replay.close()

    def test_logout_when_anonymous(self, anon_client):
        response = anon_client.post("/api/logout")

        assert response.status_code == 200

    def test_independent_sessions_per_client(self, app, admin_client):
        other = TestClient(app)
        signup_and_login(other, "alice", "wonderland")

        other.post("/api/logout")

        assert admin_client.get("/api/check-auth").json()["authenticated"] is True
        other.close()


class TestSeedAdmin:

    def test_configured_admin_created_on_startup(self, tmp_path):
        settings = make_settings(tmp_path, admin_username="root", admin_password="s3cret")

        with TestClient(create_app(settings)) as client:
            login = client.post("/api/login", json={"username": "root", "password": "s3cret"})
            signup = client.post("/api/signup", json={"username": "alice", "password": "pw"})

        assert login.status_code == 200
        assert login.json()["isAdmin"] is True
        assert signup.json()["isAdmin"] is False
