"""SQLAlchemy models."""

from src.models.account_preferences import AccountPreferences
from src.models.push_token import PushToken
from src.models.service_history import ServiceHistory
from src.models.user import User

__all__ = [
    "User",
    "PushToken",
    "ServiceHistory",
    "AccountPreferences",
]
