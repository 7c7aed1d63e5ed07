"""Notification API endpoints for push token registration and delivery."""

import logging

from fastapi import APIRouter, Depends

from src.api.dependencies import (
    AdminUser,
    CurrentUser,
    PushServiceDep,
    PushTokenStoreDep,
    rate_limit_by_ip,
    rate_limit_by_user,
)
from src.errors import NotFoundError
from src.schemas.notification import (
    BroadcastNotificationRequest,
    NotificationSummary,
    PushTokenRegister,
    PushTokenRegisterResponse,
    SendNotificationRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/notifications",
    tags=["notifications"],
    dependencies=[Depends(rate_limit_by_ip("general"))],
)


@router.post(
    "/register",
    response_model=PushTokenRegisterResponse,
    dependencies=[Depends(rate_limit_by_user("notification"))],
)
async def register_push_token(
    registration: PushTokenRegister,
    current_user: CurrentUser,
    push_tokens: PushTokenStoreDep,
):
    """Register (or refresh) this device's Expo push token."""
    token = await push_tokens.save_push_token(current_user.id, registration.expo_push_token)
    logger.info(f"Registered push token for user {current_user.id}")
    return PushTokenRegisterResponse(token_id=token.id)


@router.post(
    "/send",
    response_model=NotificationSummary,
    dependencies=[Depends(rate_limit_by_user("notification"))],
)
async def send_notification(
    notification: SendNotificationRequest,
    current_user: CurrentUser,
    push_tokens: PushTokenStoreDep,
    push_service: PushServiceDep,
):
    """Send a notification to the caller's devices, or to `targetUserId`'s."""
    target_id = str(notification.target_user_id) if notification.target_user_id else current_user.id
    tokens = await push_tokens.get_push_tokens_for_user(target_id)
    if not tokens:
        raise NotFoundError("No push tokens found")

    return await push_service.notify(tokens, notification.title, notification.body, notification.data)


@router.post(
    "/broadcast",
    response_model=NotificationSummary,
    dependencies=[Depends(rate_limit_by_user("broadcast"))],
)
async def broadcast_notification(
    notification: BroadcastNotificationRequest,
    admin: AdminUser,
    push_tokens: PushTokenStoreDep,
    push_service: PushServiceDep,
):
    """Send a notification to every registered device. Admin only."""
    tokens = await push_tokens.get_all_push_tokens()
    if not tokens:
        raise NotFoundError("No push tokens registered")

    logger.info(f"Admin {admin.id} broadcasting to {len(tokens)} devices")
    return await push_service.notify(tokens, notification.title, notification.body, notification.data)
