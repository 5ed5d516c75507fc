"""Repository factory and exports"""
from supabase import Client  # type: ignore

from .push_subscriptions import PushSubscriptionRepository
from .scheduled_notifications import ScheduledNotificationRepository


class RepositoryFactory:
    """Factory for creating repository instances"""

    def __init__(self, client: Client):
        self._client = client
        self._scheduled_notifications: ScheduledNotificationRepository = None
        self._push_subscriptions: PushSubscriptionRepository = None

    @property
    def scheduled_notifications(self) -> ScheduledNotificationRepository:
        """Get scheduled notifications repository"""
        if self._scheduled_notifications is None:
            self._scheduled_notifications = ScheduledNotificationRepository(self._client)
        return self._scheduled_notifications

    @property
    def push_subscriptions(self) -> PushSubscriptionRepository:
        """Get push subscriptions repository"""
        if self._push_subscriptions is None:
            self._push_subscriptions = PushSubscriptionRepository(self._client)
        return self._push_subscriptions


__all__ = [
    'RepositoryFactory',
    'PushSubscriptionRepository',
    'ScheduledNotificationRepository',
]
