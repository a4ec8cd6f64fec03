"""
Tests for /auth/* and the session guards.
"""

import pytest

from library_desk.circulation.errors import Conflict, InvalidArgument

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin123"


def test_login_success(client):
    """Returns the user and a 64-char token, and sets the session cookie."""
    response = client.post(
        "/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["user"]["email"] == ADMIN_EMAIL
    assert body["user"]["role"] == "librarian"
    assert "password_hash" not in body["user"]
    assert isinstance(body["token"], str) and len(body["token"]) == 64
    assert response.cookies.get("sid") == body["token"]


def test_each_login_mints_a_new_token(client):
    creds = {"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}
    t1 = client.post("/auth/login", json=creds).json()["token"]
    t2 = client.post("/auth/login", json=creds).json()["token"]
    assert t1 != t2


def test_login_wrong_password(client):
    response = client.post(
        "/auth/login", json={"email": ADMIN_EMAIL, "password": "wrong"}
    )
    assert response.status_code == 401


def test_login_unknown_user(client):
    response = client.post(
        "/auth/login", json={"email": "nobody@example.com", "password": "x"}
    )
    assert response.status_code == 401


def test_login_missing_fields(client):
    response = client.post("/auth/login", json={"email": ADMIN_EMAIL})
    assert response.status_code == 400


def test_cookie_session_is_accepted(client):
    client.post("/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    response = client.get("/auth/me")
    assert response.json()["user"]["email"] == ADMIN_EMAIL


def test_me_anonymous(client):
    assert client.get("/auth/me").json() == {"user": None}


def test_me_with_unknown_token(client):
    response = client.get("/auth/me", headers={"x-api-token": "bogus"})
    assert response.json() == {"user": None}


def test_logout_discards_session(client, librarian):
    assert client.get("/admin/stats", headers=librarian).status_code == 200
    client.post("/auth/logout", headers=librarian)
    assert client.get("/admin/stats", headers=librarian).status_code == 403
    assert client.get("/auth/me", headers=librarian).json() == {"user": None}


def test_register_defaults_to_student(client):
    response = client.post(
        "/auth/register",
        json={
            "name": "Ann",
            "email": "ann@example.com",
            "password": "pw",
            "role": "admin",
        },
    )
    assert response.status_code == 200
    assert response.json() == {
        "id": 2,
        "name": "Ann",
        "email": "ann@example.com",
        "role": "student",
    }


def test_register_librarian(client):
    response = client.post(
        "/auth/register",
        json={
            "name": "Lib",
            "email": "lib@example.com",
            "password": "pw",
            "role": "librarian",
        },
    )
    assert response.json()["role"] == "librarian"


def test_register_duplicate_email(client):
    response = client.post(
        "/auth/register",
        json={"name": "Dup", "email": ADMIN_EMAIL, "password": "pw"},
    )
    assert response.status_code == 409
    assert response.json()["detail"]["status"] == "conflict"


def test_register_missing_fields(client):
    response = client.post("/auth/register", json={"name": "NoMail", "password": "pw"})
    assert response.status_code == 400
    assert response.json()["detail"]["status"] == "invalid_argument"


# ---------------------------------------------------------------------------
# Accounts unit tests
# ---------------------------------------------------------------------------


class TestAccounts:
    def test_password_is_hashed(self, accounts):
        user = accounts.register("A", "a@example.com", "secret")
        assert user.password_hash != b"secret"
        assert accounts.authenticate("a@example.com", "secret") == user
        assert accounts.authenticate("a@example.com", "nope") is None

    def test_duplicate_email(self, accounts):
        accounts.register("A", "a@example.com", "secret")
        with pytest.raises(Conflict):
            accounts.register("B", "a@example.com", "other")
        assert len(accounts) == 1

    def test_blank_fields(self, accounts):
        with pytest.raises(InvalidArgument):
            accounts.register("  ", "a@example.com", "secret")

    def test_sessions(self, accounts):
        user = accounts.register("A", "a@example.com", "secret")
        token = accounts.open_session(user)
        assert accounts.principal(token) == user
        accounts.close_session(token)
        assert accounts.principal(token) is None
        assert accounts.principal(None) is None
