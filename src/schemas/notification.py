"""Notification-related Pydantic schemas."""

from typing import Any, Literal
from uuid import UUID

from pydantic import Field

from src.schemas.base import ApiModel, UtcDatetime
from src.validation import ExpoPushTokenStr


class PushTokenRecord(ApiModel):
    """Registered device endpoint as returned by the push token store."""

    id: str
    user_id: str
    expo_push_token: str
    created_at: UtcDatetime
    updated_at: UtcDatetime


class PushTokenRegister(ApiModel):
    """Schema for registering an Expo push token."""

    expo_push_token: ExpoPushTokenStr


class PushTokenRegisterResponse(ApiModel):
    success: bool = True
    token_id: str


class BroadcastNotificationRequest(ApiModel):
    """Schema for a notification sent to every registered device."""

    title: str = Field(..., min_length=1, max_length=200)
    body: str = Field(..., min_length=1, max_length=1000)
    data: dict[str, Any] | None = None


class SendNotificationRequest(BroadcastNotificationRequest):
    """Schema for a notification sent to one user's devices (self by default)."""

    target_user_id: UUID | None = None


class NotificationSummary(ApiModel):
    """Aggregate outcome of one dispatch."""

    success: bool = True
    sent_to: int
    delivered: int
    failed: int


class ExpoPushMessage(ApiModel):
    """One message in a batch submitted to the Expo push gateway."""

    to: str
    sound: Literal["default"] | None = "default"
    title: str | None = None
    body: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)
    priority: Literal["default", "normal", "high"] = "high"


class ExpoPushTicket(ApiModel):
    """Per-message delivery outcome returned by the gateway."""

    status: Literal["ok", "error"]
    id: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None

    @property
    def error_type(self) -> str | None:
        return (self.details or {}).get("error")
