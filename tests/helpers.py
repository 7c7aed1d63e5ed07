"""Shared helpers for API tests."""

PASSWORD = "Password123"  # noqa: S105


def register(client, email="driver@lavei.app", password=PASSWORD, **extra):
    """Register a user through the API; the client keeps the session cookie."""
    response = client.post("/api/register", json={"email": email, "password": password, **extra})
    assert response.status_code == 201, response.text
    return response.json()
