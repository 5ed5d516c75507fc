"""
Push Channels

Deliver a PushMessage to a single delivery target, either through Web Push
(VAPID) for browser subscriptions or through the Expo Push API for native
device tokens. Every failure is raised as a DeliveryError subclass so the
delivery worker can tell a dead target from a temporary outage.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

import httpx
from pywebpush import WebPushException, webpush

from rest_timer import config
from rest_timer.errors import DeliveryTargetInvalid, TransientDeliveryError
from rest_timer.models.push_message import ExpoPushMessage, PushMessage
from rest_timer.models.scheduled_notification import DeliveryTarget, PlatformKind

logger = logging.getLogger(__name__)

EXPO_PUSH_URL = "https://exp.host/--/api/v2/push/send"

# Push services answer 404/410 for subscriptions that expired or were revoked
GONE_STATUS_CODES = (404, 410)


class PushChannel(ABC):
    """A transport able to deliver one message to one target"""

    @abstractmethod
    async def send(self, target: DeliveryTarget, message: PushMessage) -> None:
        """Deliver message; raise DeliveryTargetInvalid or TransientDeliveryError on failure"""


class WebPushChannel(PushChannel):
    """Web Push delivery signed with the server's VAPID key"""

    def __init__(
        self,
        vapid_private_key: Optional[str] = None,
        vapid_subject: Optional[str] = None,
        ttl: int = 3600,
    ):
        self.vapid_private_key = vapid_private_key or config.VAPID_PRIVATE_KEY
        self.vapid_subject = vapid_subject or config.VAPID_SUBJECT
        self.ttl = ttl

    async def send(self, target: DeliveryTarget, message: PushMessage) -> None:
        if not isinstance(target, dict) or not target.get("endpoint"):
            raise DeliveryTargetInvalid("Web push subscription has no endpoint")

        if not self.vapid_private_key:
            raise TransientDeliveryError("VAPID_PRIVATE_KEY is not configured")

        data = json.dumps(message.model_dump(exclude_none=True))

        try:
            await asyncio.to_thread(
                webpush,
                subscription_info=target,
                data=data,
                vapid_private_key=self.vapid_private_key,
                # pywebpush adds aud/exp to the claims dict, so pass a fresh one
                vapid_claims={"sub": self.vapid_subject},
                ttl=self.ttl,
            )
        except WebPushException as e:
            status_code = e.response.status_code if e.response is not None else None
            if status_code in GONE_STATUS_CODES:
                raise DeliveryTargetInvalid(
                    f"Subscription expired or invalid ({status_code})", status_code=status_code
                ) from e
            raise TransientDeliveryError(f"Web push failed: {e}", status_code=status_code) from e
        except Exception as e:
            raise TransientDeliveryError(f"Web push failed: {e}") from e


class ExpoPushChannel(PushChannel):
    """Native push through the Expo Push API"""

    def __init__(
        self,
        access_token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self.access_token = access_token or config.EXPO_ACCESS_TOKEN
        self._transport = transport
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Accept-Encoding": "gzip, deflate",
        }
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    async def send(self, target: DeliveryTarget, message: PushMessage) -> None:
        if not isinstance(target, str) or not target:
            raise DeliveryTargetInvalid("Native push target must be a device token")

        expo_message = ExpoPushMessage(
            to=target,
            title=message.title,
            body=message.body,
            data=message.data,
        )

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                expo_response = await client.post(
                    EXPO_PUSH_URL,
                    json=[expo_message.model_dump()],
                    headers=self._headers(),
                    timeout=self.timeout,
                )
        except httpx.HTTPError as e:
            raise TransientDeliveryError(f"Expo API unreachable: {e}") from e

        if expo_response.status_code != 200:
            raise TransientDeliveryError(
                f"Expo API error: {expo_response.text}", status_code=expo_response.status_code
            )

        tickets = expo_response.json().get("data", [])
        if isinstance(tickets, dict):
            tickets = [tickets]

        for ticket in tickets:
            if ticket.get("status") != "error":
                continue

            error_type = (ticket.get("details") or {}).get("error")
            error_message = ticket.get("message", "")

            if error_type == "DeviceNotRegistered" or "not registered" in error_message:
                raise DeliveryTargetInvalid(f"Device not registered: {error_message}")
            raise TransientDeliveryError(f"Expo ticket error {error_type}: {error_message}")


class PushChannelRouter:
    """Picks the channel matching a record's platform"""

    def __init__(self, channels: Optional[Dict[PlatformKind, PushChannel]] = None):
        if channels is None:
            channels = {
                PlatformKind.WEB: WebPushChannel(),
                PlatformKind.NATIVE: ExpoPushChannel(),
            }
        self._channels = channels

    async def send(self, platform_kind: PlatformKind, target: DeliveryTarget, message: PushMessage) -> None:
        channel = self._channels.get(platform_kind)
        if channel is None:
            raise TransientDeliveryError(f"No push channel configured for {platform_kind.value}")
        await channel.send(target, message)
