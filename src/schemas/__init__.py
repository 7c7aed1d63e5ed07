"""Pydantic schemas for API requests and responses."""

from src.schemas.account import AccountResponse, PreferencesRecord, PreferencesResponse, PreferencesUpdate
from src.schemas.auth import GoogleProfile, MessageResponse, UserLogin, UserRegister
from src.schemas.history import (
    HistoryEntryCreate,
    HistoryEntryRecord,
    HistoryPageResponse,
    HistoryQuery,
    HistoryStatusUpdate,
    Pagination,
)
from src.schemas.notification import (
    BroadcastNotificationRequest,
    ExpoPushMessage,
    ExpoPushTicket,
    NotificationSummary,
    PushTokenRecord,
    PushTokenRegister,
    PushTokenRegisterResponse,
    SendNotificationRequest,
)
from src.schemas.user import UserCreate, UserRecord, UserResponse, UserUpdate

__all__ = [
    "UserRecord",
    "UserCreate",
    "UserUpdate",
    "UserResponse",
    "UserRegister",
    "UserLogin",
    "GoogleProfile",
    "MessageResponse",
    "PushTokenRecord",
    "PushTokenRegister",
    "PushTokenRegisterResponse",
    "SendNotificationRequest",
    "BroadcastNotificationRequest",
    "NotificationSummary",
    "ExpoPushMessage",
    "ExpoPushTicket",
    "HistoryEntryRecord",
    "HistoryEntryCreate",
    "HistoryStatusUpdate",
    "HistoryQuery",
    "Pagination",
    "HistoryPageResponse",
    "PreferencesRecord",
    "PreferencesUpdate",
    "PreferencesResponse",
    "AccountResponse",
]
