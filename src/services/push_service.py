"""Push notification dispatch through the Expo push gateway."""

import logging
from typing import Any

import httpx

from src.config import Settings, get_settings
from src.errors import GatewayError
from src.schemas.notification import ExpoPushMessage, ExpoPushTicket, NotificationSummary, PushTokenRecord
from src.stores.base import PushTokenStore

logger = logging.getLogger(__name__)

# Ticket errors meaning the device will never accept pushes again
PERMANENT_TOKEN_ERRORS = frozenset({"DeviceNotRegistered", "InvalidCredentials"})


class PushNotificationService:
    """Sends batches to the gateway and prunes tokens it reports as gone."""

    def __init__(
        self,
        push_tokens: PushTokenStore,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.push_tokens = push_tokens
        self.settings = settings or get_settings()
        self._client = client
        self.timeout = 30.0

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Accept-Encoding": "gzip, deflate",
            "Content-Type": "application/json",
        }
        if self.settings.expo_access_token:
            headers["Authorization"] = f"Bearer {self.settings.expo_access_token}"
        return headers

    async def _post(self, payload: list[dict[str, Any]]) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(
                self.settings.expo_push_url, json=payload, headers=self._headers()
            )
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(self.settings.expo_push_url, json=payload, headers=self._headers())

    async def send_push_notification(self, messages: list[ExpoPushMessage]) -> list[ExpoPushTicket]:
        """Submit one batch and return the gateway's tickets, in message order.

        Raises GatewayError when the gateway cannot be reached or answers with
        a non-success status. Tokens whose tickets report a permanent failure
        are removed from the store afterwards; transient failures are kept.
        """
        payload = [m.model_dump(mode="json", exclude_none=True) for m in messages]
        try:
            response = await self._post(payload)
        except httpx.HTTPError as e:
            logger.error(f"Push gateway unreachable: {e}")
            raise GatewayError(str(e)) from e

        if not response.is_success:
            raise GatewayError(response.text, status_code=response.status_code)

        tickets = [ExpoPushTicket.model_validate(t) for t in response.json().get("data", [])]
        logger.info(
            f"Push batch of {len(messages)}: "
            f"{sum(t.status == 'ok' for t in tickets)} ok, {sum(t.status == 'error' for t in tickets)} error"
        )

        invalid_tokens = []
        for message, ticket in zip(messages, tickets):
            if ticket.status != "error":
                continue
            logger.warning(f"Push error for {message.to}: {ticket.message}")
            if ticket.error_type in PERMANENT_TOKEN_ERRORS:
                invalid_tokens.append(message.to)

        if invalid_tokens:
            logger.info(f"Removing {len(invalid_tokens)} invalid tokens")
            for token in invalid_tokens:
                logger.info(f"Pruning push token {token}")
                await self.push_tokens.remove_push_token(token)

        return tickets

    async def notify(
        self,
        tokens: list[PushTokenRecord],
        title: str,
        body: str,
        data: dict[str, Any] | None = None,
    ) -> NotificationSummary:
        """Send the same notification to every token and summarize the outcome."""
        messages = [
            ExpoPushMessage(to=t.expo_push_token, title=title, body=body, data=data or {})
            for t in tokens
        ]
        tickets = await self.send_push_notification(messages)
        return NotificationSummary(
            sent_to=len(tokens),
            delivered=sum(t.status == "ok" for t in tickets),
            failed=sum(t.status == "error" for t in tickets),
        )
