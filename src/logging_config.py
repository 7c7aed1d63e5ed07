"""Logging setup and request logging middleware."""

import logging
import sys
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from src.config import Settings

logger = logging.getLogger("src.requests")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(settings: Settings) -> None:
    """Install a single stdout handler on the root logger."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each /api request with its status and duration."""

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)

        if request.url.path.startswith("/api"):
            duration_ms = round((time.perf_counter() - start) * 1000)
            client = request.client.host if request.client else None
            message = (
                f"{request.method} {request.url.path} {response.status_code} "
                f"{duration_ms}ms ip={client}"
            )
            if response.status_code >= 500:
                logger.error(f"Request failed: {message}")
            elif response.status_code >= 400:
                logger.warning(f"Request error: {message}")
            else:
                logger.info(f"Request completed: {message}")

        return response
