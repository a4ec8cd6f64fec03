"""
Shared fixtures: every test gets its own application instance and therefore
its own empty catalog, ledger, scan session and motor mailbox.
"""

import pytest
from fastapi.testclient import TestClient

from library_desk.circulation.accounts import Accounts
from library_desk.circulation.catalog import Catalog
from library_desk.config import Settings
from library_desk.main import create_app

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin123"


def make_settings(**overrides) -> Settings:
    values = {
        "admin_name": "Admin Librarian",
        "admin_email": ADMIN_EMAIL,
        "admin_password": ADMIN_PASSWORD,
        "bcrypt_rounds": 4,
        "device_token": "",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def app_factory():
    """Build an app with settings overridden by keyword."""

    def factory(**overrides):
        return create_app(make_settings(**overrides))

    return factory


@pytest.fixture
def app(app_factory):
    return app_factory()


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def library(app):
    return app.state.library


def login(client: TestClient, email: str, password: str) -> dict[str, str]:
    """Log in and return headers carrying the session token."""
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    # Tests authenticate through the header; drop the cookie so an anonymous
    # request really is anonymous.
    client.cookies.clear()
    return {"x-api-token": response.json()["token"]}


@pytest.fixture
def librarian(client) -> dict[str, str]:
    return login(client, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
def student(client, librarian) -> dict[str, str]:
    response = client.post(
        "/auth/register",
        json={"name": "Sam Student", "email": "sam@example.com", "password": "pw"},
    )
    assert response.status_code == 200, response.text
    return login(client, "sam@example.com", "pw")


@pytest.fixture
def catalog() -> Catalog:
    return Catalog()


@pytest.fixture
def accounts() -> Accounts:
    return Accounts(bcrypt_rounds=4)
