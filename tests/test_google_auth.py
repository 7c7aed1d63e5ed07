"""Google sign-in tests: the OAuth round trip and account linking."""

from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from src.api.dependencies import get_google_oauth
from src.config import Settings
from src.errors import ValidationError
from src.main import app
from src.schemas.auth import GoogleProfile, UserRegister
from src.services.auth import login_with_google, register_user
from src.services.google_oauth import TOKEN_URL, USERINFO_URL, GoogleOAuthClient, resolve_redirect_uri
from src.stores.memory import InMemoryUserStore
from tests.helpers import register

PROFILE = {
    "id": "google-123",
    "email": "driver@lavei.app",
    "given_name": "Ana",
    "family_name": "Souza",
    "picture": "https://lh3.googleusercontent.com/a/photo",
}


def _use_google(profile=PROFILE, token_status=200):
    """Route Google calls to a fake identity provider."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if str(request.url) == TOKEN_URL:
            if token_status != 200:
                return httpx.Response(token_status, json={"error": "invalid_grant"})
            return httpx.Response(200, json={"access_token": "access-1", "token_type": "Bearer"})
        if str(request.url) == USERINFO_URL:
            assert request.headers["Authorization"] == "Bearer access-1"
            return httpx.Response(200, json=profile)
        return httpx.Response(404)

    settings = Settings(database_url="", google_client_id="client-1", google_client_secret="secret-1")
    oauth = GoogleOAuthClient(settings, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    app.dependency_overrides[get_google_oauth] = lambda: oauth
    return seen


def _start(client, **params):
    response = client.get("/api/auth/google", params=params, follow_redirects=False)
    assert response.status_code == 307, response.text
    location = response.headers["location"]
    return location, parse_qs(urlparse(location).query)["state"][0]


def test_google_redirects_to_consent_screen(client):
    _use_google()
    location, state = _start(client)

    query = parse_qs(urlparse(location).query)
    assert location.startswith("https://accounts.google.com/o/oauth2/v2/auth")
    assert query["client_id"] == ["client-1"]
    assert query["redirect_uri"] == ["http://testserver/api/auth/google/callback"]
    assert query["scope"] == ["openid email profile"]
    assert len(state) == 32


def test_google_rejects_unlisted_redirect(client):
    _use_google()
    response = client.get(
        "/api/auth/google", params={"redirect_uri": "https://evil.example"}, follow_redirects=False
    )
    assert response.status_code == 400


def test_google_round_trip_creates_user(client):
    seen = _use_google()
    _, state = _start(client, redirect_uri="exp://127.0.0.1:8081")

    response = client.get("/api/auth/google/callback", params={"code": "code-1", "state": state})

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert 'href="exp://127.0.0.1:8081"' in response.text
    assert b"redirect_uri=http%3A%2F%2Ftestserver%2Fapi%2Fauth%2Fgoogle%2Fcallback" in seen[0].content

    user = client.get("/api/auth/user").json()
    assert user["email"] == "driver@lavei.app"
    assert user["firstName"] == "Ana"
    assert user["profileImageUrl"] == PROFILE["picture"]
    assert user["role"] == "client"


def test_google_login_links_existing_account(client):
    existing = register(client, first_name="Ana Maria")
    client.post("/api/logout")
    _use_google()
    _, state = _start(client)

    client.get("/api/auth/google/callback", params={"code": "code-1", "state": state})

    user = client.get("/api/auth/user").json()
    assert user["id"] == existing["id"]
    assert user["firstName"] == "Ana Maria"
    assert user["lastName"] == "Souza"


def test_google_callback_state_mismatch(client):
    _use_google()
    _start(client)

    response = client.get("/api/auth/google/callback", params={"code": "code-1", "state": "forged"})

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid OAuth state"
    assert client.get("/api/auth/user").status_code == 401


def test_google_callback_without_started_flow(client):
    _use_google()
    response = client.get("/api/auth/google/callback", params={"code": "code-1", "state": "abc"})
    assert response.status_code == 400


def test_google_code_exchange_failure(client):
    _use_google(token_status=400)
    _, state = _start(client)

    response = client.get("/api/auth/google/callback", params={"code": "bad", "state": state})

    assert response.status_code == 401
    assert response.json()["error"] == "Google authentication failed"


def test_resolve_redirect_uri():
    allowed = ["lavei://", "exp://127.0.0.1:8081"]
    assert resolve_redirect_uri(allowed, None) == "lavei://"
    assert resolve_redirect_uri(allowed, "exp://127.0.0.1:8081") == "exp://127.0.0.1:8081"
    assert resolve_redirect_uri(allowed, "https://evil.example") is None


class TestLoginWithGoogle:
    @pytest.mark.asyncio
    async def test_creates_passwordless_user(self):
        users = InMemoryUserStore()
        user = await login_with_google(users, GoogleProfile.model_validate(PROFILE))

        assert user.google_id == "google-123"
        assert user.password_hash is None
        assert (await login_with_google(users, GoogleProfile.model_validate(PROFILE))).id == user.id

    @pytest.mark.asyncio
    async def test_links_by_email_keeping_existing_fields(self):
        users = InMemoryUserStore()
        local = await register_user(
            users,
            UserRegister(email="Driver@Lavei.app", password="Password123", first_name="Bia"),
        )

        linked = await login_with_google(users, GoogleProfile.model_validate(PROFILE))

        assert linked.id == local.id
        assert linked.google_id == "google-123"
        assert linked.first_name == "Bia"
        assert linked.last_name == "Souza"
        assert linked.password_hash == local.password_hash

    @pytest.mark.asyncio
    async def test_requires_email_for_new_accounts(self):
        users = InMemoryUserStore()
        with pytest.raises(ValidationError):
            await login_with_google(users, GoogleProfile(id="google-456"))
