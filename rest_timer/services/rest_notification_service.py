"""
Rest Notification Service

Schedules and cancels rest-timer notifications in the durable store and keeps
the subscription registry (one delivery target per user and platform).
"""

import logging
from typing import Awaitable, Callable, Optional, TypeVar

from rest_timer import config
from rest_timer.errors import AuthorizationError, StoreUnavailable, ValidationError
from rest_timer.infra.supabase.repositories import RepositoryFactory
from rest_timer.models.push_message import PushMessage
from rest_timer.models.push_subscription import PushSubscription, PushSubscriptionCreate
from rest_timer.models.scheduled_notification import (
    DeliveryTarget,
    NotificationPayload,
    NotificationStatus,
    PlatformKind,
    ScheduledNotificationCreate,
    ScheduleRestNotificationRequest,
    ScheduleRestNotificationResponse,
)
from rest_timer.services.push_channel import PushChannelRouter
from rest_timer.utils.time_helper import ms_to_datetime, now_ms

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TITLE = "Rest Complete!"
DEFAULT_SUBJECT = "your next set"


def default_body(exercise_name: Optional[str]) -> str:
    return f"Time for {exercise_name or DEFAULT_SUBJECT}"


class RestNotificationService:
    """Service for scheduling rest notifications and registering delivery targets"""

    def __init__(
        self,
        repositories: RepositoryFactory,
        channels: Optional[PushChannelRouter] = None,
        clock: Callable[[], int] = now_ms,
    ):
        self.repositories = repositories
        self.channels = channels
        self.clock = clock

    async def _store(self, action: str, call: Awaitable[T]) -> T:
        try:
            return await call
        except Exception as e:
            logger.error(f"Store unavailable while trying to {action}: {e}")
            raise StoreUnavailable(f"Could not {action}") from e

    async def schedule(self, owner_id: Optional[str], request: ScheduleRestNotificationRequest) -> ScheduleRestNotificationResponse:
        """
        Persist a pending notification for the end of a rest period.

        Args:
            owner_id: Authenticated user the notification belongs to
            request: Scheduling request; either sendAtEpochMs or durationSeconds is required

        Returns:
            ScheduleRestNotificationResponse with the absolute send time

        Raises:
            AuthorizationError: If no authenticated owner, or the id belongs to another user
            ValidationError: If required fields are missing or no target is available
        """
        if not owner_id:
            raise AuthorizationError("User must be authenticated")

        if not request.id:
            raise ValidationError("Missing notification id")

        now = self.clock()
        if request.sendAtEpochMs is not None:
            send_at_ms = int(request.sendAtEpochMs)
        elif request.durationSeconds is not None:
            if request.durationSeconds <= 0:
                raise ValidationError("durationSeconds must be positive")
            send_at_ms = now + int(round(request.durationSeconds * 1000))
        else:
            raise ValidationError("Missing sendAtEpochMs or durationSeconds")

        delivery_target = request.deliveryTarget
        if delivery_target is None:
            subscription = await self.get_target(owner_id, request.platformKind)
            if subscription is None:
                raise ValidationError(f"No {request.platformKind.value} delivery target registered")
            delivery_target = subscription.delivery_target

        payload = NotificationPayload(
            title=request.payloadTitle or DEFAULT_TITLE,
            body=request.payloadBody or default_body(request.exerciseName),
            subject=request.exerciseName or DEFAULT_SUBJECT,
        )

        record = ScheduledNotificationCreate(
            id=request.id,
            owner_id=owner_id,
            delivery_target=delivery_target,
            platform_kind=request.platformKind,
            send_at_ms=send_at_ms,
            payload=payload,
            created_at_ms=now,
        )

        repo = self.repositories.scheduled_notifications
        existing = await self._store("read scheduled notification", repo.find_by_id(request.id))
        if existing is not None and existing.owner_id != owner_id:
            raise AuthorizationError("Notification belongs to another user")

        saved = await self._store("create scheduled notification", repo.create(record))
        if saved.status != NotificationStatus.PENDING or saved.claimed_by is not None:
            logger.info(f"Notification {request.id} is already being delivered or done ({saved.status.value}), kept unchanged")
        else:
            logger.info(f"Scheduled notification {request.id} for {ms_to_datetime(saved.send_at_ms).isoformat()} ({request.platformKind.value})")
        return ScheduleRestNotificationResponse(success=True, id=request.id, sendAtEpochMs=saved.send_at_ms)

    async def cancel(self, owner_id: Optional[str], notification_id: Optional[str]) -> bool:
        """
        Delete a scheduled notification. Cancelling an unknown id succeeds,
        since cancellation races with delivery and retention purges.
        """
        if not owner_id:
            raise AuthorizationError("User must be authenticated")
        if not notification_id:
            raise ValidationError("Missing notification id")

        repo = self.repositories.scheduled_notifications
        existing = await self._store("read scheduled notification", repo.find_by_id(notification_id))
        if existing is None:
            return True

        if existing.owner_id != owner_id:
            raise AuthorizationError("Notification belongs to another user")

        await self._store("delete scheduled notification", repo.delete(notification_id))
        logger.info(f"Cancelled notification {notification_id}")
        return True

    async def register_target(
        self,
        owner_id: Optional[str],
        delivery_target: Optional[DeliveryTarget],
        platform_kind: PlatformKind = PlatformKind.WEB,
    ) -> PushSubscription:
        """Store the current delivery target for (owner, platform), replacing the previous one"""
        if not owner_id:
            raise AuthorizationError("User must be authenticated")
        if not delivery_target:
            raise ValidationError("Missing delivery target")

        subscription = PushSubscriptionCreate(
            owner_id=owner_id,
            platform_kind=platform_kind,
            delivery_target=delivery_target,
            updated_at_ms=self.clock(),
        )
        saved = await self._store("save push subscription", self.repositories.push_subscriptions.register(subscription))

        logger.info(f"Saved {platform_kind.value} push subscription for user {owner_id}")
        return saved

    async def get_target(self, owner_id: str, platform_kind: PlatformKind) -> Optional[PushSubscription]:
        return await self._store("read push subscription", self.repositories.push_subscriptions.get(owner_id, platform_kind))

    async def send_immediate(
        self,
        owner_id: Optional[str],
        platform_kind: PlatformKind = PlatformKind.WEB,
        title: Optional[str] = None,
        body: Optional[str] = None,
    ) -> None:
        """Deliver a notification right away to the registered target (setup check)"""
        if not owner_id:
            raise AuthorizationError("User must be authenticated")
        if self.channels is None:
            raise ValidationError("No push channels configured")

        subscription = await self.get_target(owner_id, platform_kind)
        if subscription is None:
            raise ValidationError(f"No {platform_kind.value} delivery target registered")

        message = PushMessage(
            title=title or "Big Surf",
            body=body or "Notification",
            icon=config.PUSH_ICON,
            badge=config.PUSH_ICON,
            tag="bigsurf",
        )
        await self.channels.send(platform_kind, subscription.delivery_target, message)
        logger.info(f"Sent immediate {platform_kind.value} notification to user {owner_id}")
