"""
Rest notification clients used by the countdown controller.

HttpRestNotifier talks to the backend API the way the workout client does;
DirectRestNotifier calls the service in-process.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Union

import httpx

from rest_timer.models.scheduled_notification import (
    DeliveryTarget,
    PlatformKind,
    ScheduleRestNotificationRequest,
)
from rest_timer.services.rest_notification_service import RestNotificationService

logger = logging.getLogger(__name__)

API_PREFIX = "/api/rest-notifications"


class RestNotifier(ABC):
    """Schedules and cancels the background notification of a rest timer"""

    def is_available(self) -> bool:
        """Whether a delivery channel exists for this device"""
        return True

    @abstractmethod
    async def schedule(self, notification_id: str, duration_seconds: float, exercise_name: Optional[str] = None) -> Any:
        """Schedule a notification duration_seconds from now"""

    @abstractmethod
    async def cancel(self, notification_id: str) -> Any:
        """Cancel a scheduled notification"""


class HttpRestNotifier(RestNotifier):
    """Client for the rest notification API"""

    def __init__(
        self,
        base_url: str,
        access_token: Union[str, Callable[[], Optional[str]], None],
        delivery_target: Optional[DeliveryTarget] = None,
        platform_kind: PlatformKind = PlatformKind.WEB,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self.base_url = base_url.rstrip("/")
        self._access_token = access_token
        self.delivery_target = delivery_target
        self.platform_kind = platform_kind
        self._transport = transport
        self.timeout = timeout

    def _token(self) -> Optional[str]:
        if callable(self._access_token):
            return self._access_token()
        return self._access_token

    def is_available(self) -> bool:
        if not self._token():
            return False
        # Native targets are looked up server side from the registry
        return self.delivery_target is not None or self.platform_kind == PlatformKind.NATIVE

    async def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        token = self._token()
        if not token:
            raise RuntimeError("Not signed in")

        async with httpx.AsyncClient(base_url=self.base_url, transport=self._transport) as client:
            response = await client.post(
                f"{API_PREFIX}{path}",
                json=body,
                headers={"Authorization": f"Bearer {token}"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.json()

    async def schedule(self, notification_id: str, duration_seconds: float, exercise_name: Optional[str] = None) -> Dict[str, Any]:
        logger.info(f"📅 Scheduling notification for {duration_seconds} seconds - {exercise_name}")
        request = ScheduleRestNotificationRequest(
            id=notification_id,
            deliveryTarget=self.delivery_target,
            platformKind=self.platform_kind,
            durationSeconds=duration_seconds,
            exerciseName=exercise_name,
        )
        return await self._post("/schedule", request.model_dump(mode="json", exclude_none=True))

    async def cancel(self, notification_id: str) -> Dict[str, Any]:
        return await self._post("/cancel", {"id": notification_id})

    async def register_target(self, delivery_target: DeliveryTarget, platform_kind: Optional[PlatformKind] = None) -> Dict[str, Any]:
        """Save the push subscription / device token server side and use it for new timers"""
        if platform_kind is not None:
            self.platform_kind = platform_kind
        result = await self._post("/subscriptions", {
            "deliveryTarget": delivery_target,
            "platformKind": self.platform_kind.value,
        })
        self.delivery_target = delivery_target
        logger.info("✅ Push subscription saved to server")
        return result

    async def send_test(self, title: str = "Test Notification", body: str = "Push notifications are working!") -> Dict[str, Any]:
        return await self._post("/test", {
            "title": title,
            "body": body,
            "platformKind": self.platform_kind.value,
        })


class DirectRestNotifier(RestNotifier):
    """Calls RestNotificationService directly on behalf of one user"""

    def __init__(
        self,
        service: RestNotificationService,
        owner_id: str,
        delivery_target: Optional[DeliveryTarget] = None,
        platform_kind: PlatformKind = PlatformKind.WEB,
    ):
        self.service = service
        self.owner_id = owner_id
        self.delivery_target = delivery_target
        self.platform_kind = platform_kind

    async def schedule(self, notification_id: str, duration_seconds: float, exercise_name: Optional[str] = None):
        return await self.service.schedule(self.owner_id, ScheduleRestNotificationRequest(
            id=notification_id,
            deliveryTarget=self.delivery_target,
            platformKind=self.platform_kind,
            durationSeconds=duration_seconds,
            exerciseName=exercise_name,
        ))

    async def cancel(self, notification_id: str) -> bool:
        return await self.service.cancel(self.owner_id, notification_id)
