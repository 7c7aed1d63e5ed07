"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from src.api import account, auth, history, notifications
from src.api.dependencies import rate_limit_by_ip
from src.config import get_settings
from src.errors import register_exception_handlers
from src.logging_config import RequestLoggingMiddleware, configure_logging
from src.services.rate_limiter import RateLimiters
from src.stores import create_stores

settings = get_settings()
configure_logging(settings)

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Wire stores and rate limiters once; release the database on shutdown."""
    app.state.stores = create_stores(settings)
    app.state.rate_limiters = RateLimiters.from_settings(settings)
    logger.info(f"Lavei API started (environment={settings.environment})")
    yield
    app.state.stores.close()


app = FastAPI(
    title="Lavei API",
    description="Car-wash booking backend: accounts, push notifications, service history",
    version=API_VERSION,
    lifespan=lifespan,
)

register_exception_handlers(app)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret,
    max_age=settings.session_max_age_seconds,
    same_site="lax",
    https_only=settings.is_production,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(auth.router)
app.include_router(notifications.router)
app.include_router(history.router)
app.include_router(account.router)

general_rate_limit = [Depends(rate_limit_by_ip("general"))]


@app.get("/")
async def root():
    return {"status": "ok", "message": "Lavei API is running"}


@app.get("/api", dependencies=general_rate_limit)
async def api_index():
    """List the available endpoints."""
    return {
        "message": "Lavei API",
        "version": API_VERSION,
        "endpoints": {
            "health": "GET /api/health",
            "auth": {
                "register": "POST /api/register",
                "login": "POST /api/login",
                "logout": "POST /api/logout",
                "user": "GET /api/auth/user",
                "google": "GET /api/auth/google",
            },
            "notifications": {
                "register": "POST /api/notifications/register",
                "send": "POST /api/notifications/send",
                "broadcast": "POST /api/notifications/broadcast",
            },
            "history": {
                "list": "GET /api/history",
                "create": "POST /api/history",
                "detail": "GET /api/history/:serviceId",
                "updateStatus": "PATCH /api/history/:serviceId/status",
            },
            "account": {
                "details": "GET /api/account",
                "updatePreferences": "PUT /api/account/preferences",
            },
        },
    }


@app.get("/api/health", dependencies=general_rate_limit)
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "timestamp": datetime.now(UTC).isoformat()}


def run():
    """Run the server (uvicorn)."""
    uvicorn.run("src.main:app", host="0.0.0.0", port=5000)  # noqa: S104


if __name__ == "__main__":
    run()
