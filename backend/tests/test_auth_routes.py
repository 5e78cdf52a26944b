"""
Registration, login and logout.
"""

import pytest

from ticketing.extensions import db
from ticketing.models import User
from ticketing.services.credential_service import get_credential_service


def _register(client, **overrides):
    payload = {"name": "Alice", "email": "alice@example.com", "password": "secret1"}
    payload.update(overrides)
    return client.post("/api/register", json=payload)


class TestRegister:

    def test_register_returns_token_and_user(self, client):
        resp = _register(client)
        assert resp.status_code == 201

        body = resp.get_json()
        assert body["user"]["email"] == "alice@example.com"
        assert body["user"]["role"] == "user"
        assert "password" not in body["user"]
        assert "password_hash" not in body["user"]

        claims = get_credential_service().verify_token(body["token"])
        assert claims.user_id == body["user"]["id"]
        assert claims.role == "user"

    def test_password_stored_hashed(self, client):
        _register(client)
        user = db.session.query(User).filter_by(email="alice@example.com").one()
        assert user.password_hash != "secret1"
        assert get_credential_service().verify_password("secret1", user.password_hash)

    def test_register_cannot_choose_role(self, client):
        resp = _register(client, role="admin")
        assert resp.status_code == 201
        assert resp.get_json()["user"]["role"] == "user"

    def test_email_normalized(self, client):
        resp = _register(client, email="  Alice@Example.COM ")
        assert resp.get_json()["user"]["email"] == "alice@example.com"

    def test_duplicate_email_conflict(self, client):
        assert _register(client).status_code == 201
        resp = _register(client, email="ALICE@example.com", name="Alice 2")
        assert resp.status_code == 409
        assert resp.get_json()["error"] == "User already exists with this email"

    def test_short_password_rejected(self, client):
        resp = _register(client, password="12345")
        assert resp.status_code == 400
        assert "at least 6" in resp.get_json()["error"]

    def test_overlong_password_rejected(self, client):
        resp = _register(client, password="x" * 73)
        assert resp.status_code == 400

    @pytest.mark.parametrize(
        "overrides",
        [{"name": ""}, {"email": "not-an-email"}, {"email": None}, {"password": None}],
    )
    def test_invalid_fields_rejected(self, client, overrides):
        resp = _register(client, **overrides)
        assert resp.status_code == 400
        assert db.session.query(User).count() == 0

    def test_non_object_body_rejected(self, client):
        resp = client.post("/api/register", json=["alice"])
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Request body must be a JSON object"


class TestLogin:

    def test_login_success(self, client, user):
        resp = client.post("/api/login", json={"email": "user@example.com", "password": "secret1"})
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["user"]["id"] == user.id
        assert get_credential_service().verify_token(body["token"]).user_id == user.id

    def test_login_email_case_insensitive(self, client, user):
        resp = client.post("/api/login", json={"email": "USER@example.com", "password": "secret1"})
        assert resp.status_code == 200

    def test_wrong_password(self, client, user):
        resp = client.post("/api/login", json={"email": "user@example.com", "password": "wrong-one"})
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid credentials"

    def test_unknown_email_same_error(self, client, user):
        resp = client.post("/api/login", json={"email": "nobody@example.com", "password": "secret1"})
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid credentials"

    def test_missing_fields(self, client):
        resp = client.post("/api/login", json={"email": "user@example.com"})
        assert resp.status_code == 400


class TestLogout:

    def test_logout_message(self, client):
        resp = client.post("/api/logout")
        assert resp.status_code == 200
        assert resp.get_json() == {"message": "Logged out successfully"}
