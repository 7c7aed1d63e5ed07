"""Tests for Expo push dispatch."""

import json
from unittest.mock import AsyncMock

import httpx
import pytest

from src.config import Settings
from src.errors import GatewayError
from src.schemas.notification import ExpoPushMessage
from src.schemas.user import UserCreate
from src.services.push_service import PushNotificationService
from src.stores import PushTokenStore, create_memory_stores

GOOD = "ExponentPushToken[good]"  # noqa: S105
GONE = "ExponentPushToken[gone]"  # noqa: S105
BUSY = "ExponentPushToken[busy]"  # noqa: S105


class Gateway:
    """Records requests and answers with canned tickets."""

    def __init__(self, tickets=None, status_code=200):
        self.tickets = tickets or []
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, text="gateway exploded")
        return httpx.Response(200, json={"data": self.tickets})


def _service(stores, gateway, **settings):
    return PushNotificationService(
        stores.push_tokens,
        Settings(database_url="", **settings),
        client=httpx.AsyncClient(transport=httpx.MockTransport(gateway)),
    )


class TestPushNotificationService:
    @pytest.mark.asyncio
    async def test_sends_expo_payload(self):
        stores = create_memory_stores()
        gateway = Gateway(tickets=[{"status": "ok", "id": "t-1"}])
        service = _service(stores, gateway, expo_access_token="secret")

        tickets = await service.send_push_notification(
            [ExpoPushMessage(to=GOOD, title="Done", body="Your car is clean", data={"serviceId": "s1"})]
        )

        assert [t.status for t in tickets] == ["ok"]
        request = gateway.requests[0]
        assert request.headers["Authorization"] == "Bearer secret"
        assert json.loads(request.content) == [
            {
                "to": GOOD,
                "sound": "default",
                "title": "Done",
                "body": "Your car is clean",
                "data": {"serviceId": "s1"},
                "priority": "high",
            }
        ]

    @pytest.mark.asyncio
    async def test_prunes_permanently_failed_tokens(self):
        stores = create_memory_stores()
        user = await stores.users.create_user(UserCreate(email="driver@lavei.app"))
        tokens = [await stores.push_tokens.save_push_token(user.id, t) for t in (GOOD, GONE, BUSY)]
        gateway = Gateway(
            tickets=[
                {"status": "ok", "id": "t-1"},
                {"status": "error", "message": "gone", "details": {"error": "DeviceNotRegistered"}},
                {"status": "error", "message": "busy", "details": {"error": "MessageRateExceeded"}},
            ]
        )

        summary = await _service(stores, gateway).notify(tokens, "Hi", "There")

        assert summary.sent_to == 3
        assert summary.delivered == 1
        assert summary.failed == 2
        remaining = [t.expo_push_token for t in await stores.push_tokens.get_all_push_tokens()]
        assert remaining == [GOOD, BUSY]

    @pytest.mark.asyncio
    async def test_gateway_error_status(self):
        stores = create_memory_stores()
        service = _service(stores, Gateway(status_code=502))

        with pytest.raises(GatewayError) as exc_info:
            await service.send_push_notification([ExpoPushMessage(to=GOOD, title="Hi", body="There")])

        assert exc_info.value.gateway_status == 502
        assert exc_info.value.body == "gateway exploded"
        assert exc_info.value.message == "Failed to send notification"

    @pytest.mark.asyncio
    async def test_gateway_unreachable(self):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        stores = create_memory_stores()
        service = PushNotificationService(
            stores.push_tokens,
            Settings(database_url=""),
            client=httpx.AsyncClient(transport=httpx.MockTransport(refuse)),
        )

        with pytest.raises(GatewayError):
            await service.send_push_notification([ExpoPushMessage(to=GOOD, title="Hi", body="There")])

    @pytest.mark.asyncio
    async def test_invalid_credentials_token_removed_once_per_ticket(self):
        push_tokens = AsyncMock(spec=PushTokenStore)
        gateway = Gateway(
            tickets=[
                {"status": "error", "message": "bad creds", "details": {"error": "InvalidCredentials"}},
                {"status": "error", "message": "too big", "details": {"error": "MessageTooBig"}},
            ]
        )
        service = PushNotificationService(
            push_tokens,
            Settings(database_url=""),
            client=httpx.AsyncClient(transport=httpx.MockTransport(gateway)),
        )

        tickets = await service.send_push_notification(
            [ExpoPushMessage(to=GONE, title="Hi", body="x"), ExpoPushMessage(to=BUSY, title="Hi", body="x")]
        )

        assert [t.error_type for t in tickets] == ["InvalidCredentials", "MessageTooBig"]
        push_tokens.remove_push_token.assert_awaited_once_with(GONE)
