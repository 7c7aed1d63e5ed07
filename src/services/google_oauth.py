"""Google OAuth 2.0 authorization-code flow."""

import logging
import secrets
from urllib.parse import urlencode

import httpx

from src.config import Settings
from src.errors import AuthenticationError
from src.schemas.auth import GoogleProfile

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"  # noqa: S105
USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"


def create_oauth_state() -> str:
    """Anti-forgery value stored in the session and echoed back by Google."""
    return secrets.token_hex(16)


def resolve_redirect_uri(allowed: list[str], candidate: str | None) -> str | None:
    """Pick the deep link to return to after login.

    No candidate means the first allowed URI; an unlisted candidate is refused.
    """
    if not candidate:
        return allowed[0] if allowed else "lavei://"
    if candidate in allowed:
        return candidate
    return None


class GoogleOAuthClient:
    """Builds the consent URL and trades a callback code for the user's profile."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None) -> None:
        self.client_id = settings.google_client_id
        self.client_secret = settings.google_client_secret
        self.callback_url = settings.google_callback_url
        self._client = client
        self.timeout = 10.0

    def callback_for(self, base_url: str) -> str:
        if self.callback_url.startswith(("http://", "https://")):
            return self.callback_url
        return base_url.rstrip("/") + self.callback_url

    def authorization_url(self, state: str, redirect_uri: str) -> str:
        query = urlencode(
            {
                "client_id": self.client_id,
                "redirect_uri": redirect_uri,
                "response_type": "code",
                "scope": "openid email profile",
                "state": state,
            }
        )
        return f"{AUTHORIZE_URL}?{query}"

    async def _fetch_profile(self, client: httpx.AsyncClient, code: str, redirect_uri: str) -> GoogleProfile:
        token_response = await client.post(
            TOKEN_URL,
            data={
                "code": code,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uri": redirect_uri,
                "grant_type": "authorization_code",
            },
        )
        token_response.raise_for_status()
        access_token = token_response.json()["access_token"]

        profile_response = await client.get(
            USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"}
        )
        profile_response.raise_for_status()
        return GoogleProfile.model_validate(profile_response.json())

    async def fetch_profile(self, code: str, redirect_uri: str) -> GoogleProfile:
        """Exchange the authorization code and read the Google profile."""
        try:
            if self._client is not None:
                return await self._fetch_profile(self._client, code, redirect_uri)
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                return await self._fetch_profile(client, code, redirect_uri)
        except (httpx.HTTPError, KeyError) as e:
            logger.warning(f"Google code exchange failed: {e}")
            raise AuthenticationError("Google authentication failed") from e
