"""Push subscriptions repository (one delivery target per user and platform)"""
from typing import Optional

from supabase import Client  # type: ignore

from rest_timer.models.push_subscription import PushSubscription, PushSubscriptionCreate
from rest_timer.models.scheduled_notification import DeliveryTarget, PlatformKind

from .base import BaseRepository


class PushSubscriptionRepository(BaseRepository[PushSubscription, PushSubscriptionCreate]):
    """Repository for registered delivery targets"""

    def __init__(self, client: Client):
        super().__init__(client, "push_subscriptions", PushSubscription)

    async def register(self, data: PushSubscriptionCreate) -> PushSubscription:
        """Store the target, replacing any previous one for (owner, platform)"""
        return await self.upsert(data, on_conflict="owner_id,platform_kind")

    async def get(self, owner_id: str, platform_kind: PlatformKind) -> Optional[PushSubscription]:
        found = await self.find_by_filters(
            {"owner_id": owner_id, "platform_kind": platform_kind.value}, limit=1
        )
        return found[0] if found else None

    async def delete_if_target(self, owner_id: str, platform_kind: PlatformKind, delivery_target: DeliveryTarget) -> bool:
        """Remove the registration only if it still points at delivery_target"""
        current = await self.get(owner_id, platform_kind)
        if current is None or current.delivery_target != delivery_target:
            return False

        response = (
            self._table()
            .delete()
            .eq("owner_id", owner_id)
            .eq("platform_kind", platform_kind.value)
            .execute()
        )
        return len(response.data or []) > 0
