"""FastAPI dependencies for stores, sessions, role gates and rate limits."""

import logging
from collections.abc import AsyncIterator, Callable
from typing import Annotated, Any

from fastapi import Depends, Request

from src.config import Settings, get_settings
from src.errors import AppError, AuthenticationError, AuthorizationError, NotFoundError
from src.models.enums import UserRole
from src.schemas.user import UserRecord
from src.services.google_oauth import GoogleOAuthClient
from src.services.push_service import PushNotificationService
from src.services.rate_limiter import RateLimiters
from src.stores import HistoryStore, PreferencesStore, PushTokenStore, Stores, UserStore

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user_id"


def get_stores(request: Request) -> Stores:
    """Inject the stores wired at startup."""
    return request.app.state.stores


def get_rate_limiters(request: Request) -> RateLimiters:
    return request.app.state.rate_limiters


StoresDep = Annotated[Stores, Depends(get_stores)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
LimitersDep = Annotated[RateLimiters, Depends(get_rate_limiters)]


def get_user_store(stores: StoresDep) -> UserStore:
    return stores.users


def get_push_token_store(stores: StoresDep) -> PushTokenStore:
    return stores.push_tokens


def get_history_store(stores: StoresDep) -> HistoryStore:
    return stores.history


def get_preferences_store(stores: StoresDep) -> PreferencesStore:
    return stores.preferences


UserStoreDep = Annotated[UserStore, Depends(get_user_store)]
PushTokenStoreDep = Annotated[PushTokenStore, Depends(get_push_token_store)]
HistoryStoreDep = Annotated[HistoryStore, Depends(get_history_store)]
PreferencesStoreDep = Annotated[PreferencesStore, Depends(get_preferences_store)]


def login_session(request: Request, user: UserRecord) -> None:
    """Attach the user's identity to the signed session cookie."""
    request.session[SESSION_USER_KEY] = user.id


def logout_session(request: Request) -> None:
    request.session.clear()


async def get_current_user(request: Request, users: UserStoreDep) -> UserRecord:
    """Resolve the session user. Fails closed when there is no valid session."""
    user_id = request.session.get(SESSION_USER_KEY)
    if not user_id:
        raise AuthenticationError()

    user = await users.find_by_id(user_id)
    if user is None:
        logout_session(request)
        raise AuthenticationError()

    return user


CurrentUser = Annotated[UserRecord, Depends(get_current_user)]


def require_role(*allowed_roles: UserRole) -> Callable[..., Any]:
    """Gate a route to the given roles; other authenticated users get 403."""

    async def dependency(request: Request, user: CurrentUser) -> UserRecord:
        if user.role not in allowed_roles:
            logger.warning(
                f"Access denied to {request.url.path} for user {user.id} "
                f"with role {user.role.value}"
            )
            raise AuthorizationError()
        return user

    return dependency


AdminUser = Annotated[UserRecord, Depends(require_role(UserRole.ADMIN))]


def client_ip(request: Request) -> str:
    settings = get_settings()
    forwarded = request.headers.get("x-forwarded-for")
    if settings.trust_proxy and forwarded:
        # Only the last hop was written by our proxy; earlier ones come from the caller
        return forwarded.split(",")[-1].strip()
    return request.client.host if request.client else "anonymous"


def rate_limit_by_ip(name: str, failures_only: bool = False) -> Callable[..., Any]:
    """Throttle by caller IP.

    With `failures_only`, only requests ending in an application error count
    toward the limit.
    """

    async def dependency(request: Request, limiters: LimitersDep) -> AsyncIterator[None]:
        limiter = limiters.get(name)
        key = client_ip(request)
        if not failures_only:
            limiter.consume(key)
            yield
            return

        limiter.check(key)
        try:
            yield
        except AppError:
            limiter.hit(key)
            raise

    return dependency


def rate_limit_by_user(name: str) -> Callable[..., Any]:
    """Throttle by authenticated user id. Implies an authenticated session."""

    async def dependency(user: CurrentUser, limiters: LimitersDep) -> None:
        limiters.get(name).consume(user.id)

    return dependency


def get_push_service(stores: StoresDep, settings: SettingsDep) -> PushNotificationService:
    """Get push notification service with dependencies."""
    return PushNotificationService(stores.push_tokens, settings)


def get_google_oauth(settings: SettingsDep) -> GoogleOAuthClient:
    if not settings.google_enabled:
        raise NotFoundError("Google login is not configured")
    return GoogleOAuthClient(settings)


PushServiceDep = Annotated[PushNotificationService, Depends(get_push_service)]
GoogleOAuthDep = Annotated[GoogleOAuthClient, Depends(get_google_oauth)]
