"""Pytest configuration and fixtures."""

import os

# The API under test always runs on the in-memory stores
os.environ["DATABASE_URL"] = ""
os.environ.setdefault("ENVIRONMENT", "test")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from src.main import app  # noqa: E402
from tests.helpers import register  # noqa: E402


@pytest.fixture(scope="function")
def client():
    """Test client with fresh stores and rate limiters for every test."""
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def stores(client):
    return app.state.stores


@pytest.fixture
def auth_user(client):
    """A regular client user, signed in on the default client."""
    return register(client, first_name="Ana", last_name="Souza")


@pytest.fixture
def auth_client(client, auth_user):
    return client


@pytest.fixture
def admin_session(client):
    """A second client sharing the app state, signed in as an admin.

    Used without `with`: entering it would restart the lifespan and replace
    the shared stores.
    """
    admin = TestClient(app)
    try:
        yield admin, register(admin, email="admin@lavei.app", role="admin")
    finally:
        admin.close()


@pytest.fixture
def admin_client(admin_session):
    return admin_session[0]


@pytest.fixture
def admin_user(admin_session):
    return admin_session[1]
