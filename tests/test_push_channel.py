import json
from types import SimpleNamespace

import httpx
import pytest
from pywebpush import WebPushException

from rest_timer.errors import DeliveryTargetInvalid, TransientDeliveryError
from rest_timer.models.push_message import PushMessage
from rest_timer.models.scheduled_notification import PlatformKind
from rest_timer.services import push_channel
from rest_timer.services.push_channel import (
    EXPO_PUSH_URL,
    ExpoPushChannel,
    PushChannelRouter,
    WebPushChannel,
)


@pytest.fixture
def message():
    return PushMessage.for_rest_timer("rest_1", "Rest Complete!", "Time for Squat", icon="/BigSurf.png")


def expo_transport(status_code=200, body=None, calls=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        return httpx.Response(status_code, json=body if body is not None else {"data": [{"status": "ok", "id": "t1"}]})
    return httpx.MockTransport(handler)


# ----------------------------------------------------------------------
# Expo
# ----------------------------------------------------------------------

async def test_expo_posts_single_message(message):
    calls = []
    channel = ExpoPushChannel(access_token="expo-token", transport=expo_transport(calls=calls))

    await channel.send("ExponentPushToken[abc]", message)

    request = calls[0]
    assert str(request.url) == EXPO_PUSH_URL
    assert request.headers["Authorization"] == "Bearer expo-token"
    sent = json.loads(request.content)
    assert len(sent) == 1
    assert sent[0]["to"] == "ExponentPushToken[abc]"
    assert sent[0]["title"] == "Rest Complete!"
    assert sent[0]["data"] == {"kind": "rest-timer", "notificationId": "rest_1"}


async def test_expo_device_not_registered_is_invalid_target(message):
    body = {"data": [{
        "status": "error",
        "message": '"ExponentPushToken[abc]" is not a registered push notification recipient',
        "details": {"error": "DeviceNotRegistered"},
    }]}
    channel = ExpoPushChannel(transport=expo_transport(body=body))

    with pytest.raises(DeliveryTargetInvalid):
        await channel.send("ExponentPushToken[abc]", message)


async def test_expo_other_ticket_error_is_transient(message):
    body = {"data": [{"status": "error", "message": "Rate exceeded", "details": {"error": "MessageRateExceeded"}}]}
    channel = ExpoPushChannel(transport=expo_transport(body=body))

    with pytest.raises(TransientDeliveryError):
        await channel.send("ExponentPushToken[abc]", message)


async def test_expo_server_error_is_transient(message):
    channel = ExpoPushChannel(transport=expo_transport(status_code=500, body={"errors": []}))

    with pytest.raises(TransientDeliveryError) as exc_info:
        await channel.send("ExponentPushToken[abc]", message)
    assert exc_info.value.status_code == 500


async def test_expo_network_error_is_transient(message):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    channel = ExpoPushChannel(transport=httpx.MockTransport(handler))

    with pytest.raises(TransientDeliveryError):
        await channel.send("ExponentPushToken[abc]", message)


async def test_expo_rejects_non_token_target(message):
    channel = ExpoPushChannel(transport=expo_transport())

    with pytest.raises(DeliveryTargetInvalid):
        await channel.send({"endpoint": "https://push.example.com"}, message)


# ----------------------------------------------------------------------
# Web Push
# ----------------------------------------------------------------------

def push_service_error(status_code):
    response = SimpleNamespace(status_code=status_code, text="")
    return WebPushException(f"Push failed: {status_code}", response=response)


async def test_web_push_sends_signed_payload(monkeypatch, message, web_subscription):
    calls = []
    monkeypatch.setattr(push_channel, "webpush", lambda **kwargs: calls.append(kwargs))
    channel = WebPushChannel(vapid_private_key="private-key", vapid_subject="mailto:test@example.com")

    await channel.send(web_subscription, message)

    kwargs = calls[0]
    assert kwargs["subscription_info"] == web_subscription
    assert kwargs["vapid_private_key"] == "private-key"
    assert kwargs["vapid_claims"] == {"sub": "mailto:test@example.com"}
    payload = json.loads(kwargs["data"])
    assert payload["tag"] == "rest-timer"
    assert payload["badge"] == "/BigSurf.png"
    assert payload["data"]["notificationId"] == "rest_1"


@pytest.mark.parametrize("status_code", [404, 410])
async def test_web_push_gone_subscription_is_invalid_target(monkeypatch, message, web_subscription, status_code):
    def fail(**kwargs):
        raise push_service_error(status_code)

    monkeypatch.setattr(push_channel, "webpush", fail)
    channel = WebPushChannel(vapid_private_key="private-key")

    with pytest.raises(DeliveryTargetInvalid) as exc_info:
        await channel.send(web_subscription, message)
    assert exc_info.value.status_code == status_code


async def test_web_push_server_error_is_transient(monkeypatch, message, web_subscription):
    def fail(**kwargs):
        raise push_service_error(500)

    monkeypatch.setattr(push_channel, "webpush", fail)
    channel = WebPushChannel(vapid_private_key="private-key")

    with pytest.raises(TransientDeliveryError):
        await channel.send(web_subscription, message)


async def test_web_push_without_endpoint_is_invalid_target(message):
    channel = WebPushChannel(vapid_private_key="private-key")

    with pytest.raises(DeliveryTargetInvalid):
        await channel.send({"keys": {}}, message)


async def test_web_push_without_vapid_key_is_transient(monkeypatch, message, web_subscription):
    monkeypatch.setattr(push_channel.config, "VAPID_PRIVATE_KEY", None)
    channel = WebPushChannel()

    with pytest.raises(TransientDeliveryError):
        await channel.send(web_subscription, message)


# ----------------------------------------------------------------------
# Router
# ----------------------------------------------------------------------

async def test_router_without_channel_for_platform_is_transient(message, web_channel):
    router = PushChannelRouter({PlatformKind.WEB: web_channel})

    with pytest.raises(TransientDeliveryError):
        await router.send(PlatformKind.NATIVE, "ExponentPushToken[abc]", message)
