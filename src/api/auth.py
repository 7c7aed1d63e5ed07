"""Authentication API endpoints: local accounts, session and Google sign-in."""

import html
import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from src.api.dependencies import (
    CurrentUser,
    GoogleOAuthDep,
    SettingsDep,
    UserStoreDep,
    login_session,
    logout_session,
    rate_limit_by_ip,
)
from src.errors import AuthenticationError, ValidationError
from src.schemas.auth import MessageResponse, UserLogin, UserRegister
from src.schemas.user import UserResponse
from src.services.auth import authenticate_user, login_with_google, register_user
from src.services.google_oauth import create_oauth_state, resolve_redirect_uri

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["auth"],
    dependencies=[Depends(rate_limit_by_ip("general"))],
)

auth_rate_limit = Depends(rate_limit_by_ip("auth", failures_only=True))

OAUTH_STATE_KEY = "oauth_state"
OAUTH_REDIRECT_KEY = "oauth_redirect_uri"


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[auth_rate_limit],
)
async def register(request: Request, user_data: UserRegister, users: UserStoreDep):
    """Register a new user and start a session."""
    user = await register_user(users, user_data)
    login_session(request, user)
    logger.info(f"Registered user {user.id} with role {user.role.value}")
    return user


@router.get("/login")
async def login_get():
    """Login is POST-only; tell browsers that land here."""
    raise ValidationError("Use POST /api/login with email and password")


@router.post("/login", response_model=UserResponse, dependencies=[auth_rate_limit])
async def login(request: Request, credentials: UserLogin, users: UserStoreDep):
    """Login with email and password."""
    user = await authenticate_user(users, credentials.email, credentials.password)
    login_session(request, user)
    return user


@router.post("/logout", response_model=MessageResponse)
async def logout(request: Request):
    """Drop the session. Succeeds even without one."""
    logout_session(request)
    return MessageResponse(message="Logged out successfully")


@router.get("/auth/user", response_model=UserResponse)
async def get_me(current_user: CurrentUser):
    """Get current user information."""
    return current_user


@router.get("/auth/google")
async def google_login(
    request: Request,
    google: GoogleOAuthDep,
    settings: SettingsDep,
    redirect_uri: str | None = None,
):
    """Start the Google flow; the deep link to return to is kept in the session."""
    target = resolve_redirect_uri(settings.redirect_uris, redirect_uri)
    if target is None:
        raise ValidationError("redirect_uri not allowed")

    state = create_oauth_state()
    request.session[OAUTH_STATE_KEY] = state
    request.session[OAUTH_REDIRECT_KEY] = target
    callback = google.callback_for(str(request.base_url))
    return RedirectResponse(google.authorization_url(state, callback))


@router.get("/auth/google/callback", response_class=HTMLResponse)
async def google_callback(
    request: Request,
    google: GoogleOAuthDep,
    settings: SettingsDep,
    users: UserStoreDep,
    code: str | None = None,
    state: str | None = None,
):
    """Finish the Google flow and hand back to the app through a bridge page."""
    expected_state = request.session.pop(OAUTH_STATE_KEY, None)
    if not expected_state or not state or state != expected_state:
        logger.warning("Invalid OAuth state received from Google")
        raise ValidationError("Invalid OAuth state")
    if not code:
        raise AuthenticationError("Google authentication failed")

    profile = await google.fetch_profile(code, google.callback_for(str(request.base_url)))
    user = await login_with_google(users, profile)

    stored_redirect = request.session.pop(OAUTH_REDIRECT_KEY, None)
    redirect_uri = resolve_redirect_uri(settings.redirect_uris, stored_redirect) or "lavei://"
    login_session(request, user)
    logger.info(f"Google login for user {user.id}, redirecting to {redirect_uri}")
    return HTMLResponse(render_bridge_page(redirect_uri))


@router.get("/auth/google/failure")
async def google_failure():
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"success": False, "message": "Google authentication failed"},
    )


def render_bridge_page(redirect_uri: str) -> str:
    """HTML page that bounces the browser back into the mobile app."""
    href = html.escape(redirect_uri, quote=True)
    return f"""<!DOCTYPE html>
<html>
  <head>
    <title>Signed in - Lavei</title>
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <meta http-equiv="refresh" content="0;url={href}">
    <style>
      body {{
        font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Helvetica, Arial, sans-serif;
        display: flex; flex-direction: column; align-items: center; justify-content: center;
        height: 100vh; margin: 0; background-color: #f0b100; color: #071121;
      }}
      .btn {{
        display: inline-block; padding: 12px 24px; margin-top: 20px; border-radius: 8px;
        background-color: #071121; color: #ffffff; text-decoration: none; font-weight: bold;
      }}
    </style>
  </head>
  <body>
    <h1>Signed in!</h1>
    <p>If the app does not open automatically, tap below:</p>
    <a href="{href}" class="btn">Back to the app</a>
  </body>
</html>
"""
