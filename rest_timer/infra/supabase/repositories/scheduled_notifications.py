"""Scheduled rest notifications repository"""
from datetime import datetime, timezone
from typing import List, Optional

from supabase import Client  # type: ignore

from rest_timer.models.scheduled_notification import (
    NotificationStatus,
    ScheduledNotification,
    ScheduledNotificationCreate,
)

from .base import BaseRepository


class ScheduledNotificationRepository(BaseRepository[ScheduledNotification, ScheduledNotificationCreate]):
    """
    Durable schedule of rest notifications, addressable by caller-generated id.

    Status transitions are conditional updates so that overlapping sweeps
    cannot move a record out of ``pending`` twice.
    """

    def __init__(self, client: Client):
        super().__init__(client, "scheduled_notifications", ScheduledNotification)

    async def create(self, data: ScheduledNotificationCreate) -> ScheduledNotification:
        """
        Create a record, or overwrite one with the same id that is still
        pending and unclaimed. A record already claimed by a sweep, sent or
        failed is returned unchanged, so a repeated create never moves it
        back to pending.
        """
        existing = await self.find_by_id(data.id)
        if existing is None:
            return await self.upsert(data, on_conflict="id")
        if existing.status != NotificationStatus.PENDING or existing.claimed_by is not None:
            return existing

        response = (
            self._table()
            .update(data.model_dump(mode='json'))
            .eq("id", data.id)
            .eq("status", NotificationStatus.PENDING.value)
            .is_("claimed_by", "null")
            .execute()
        )
        if response.data:
            return self._to_model(response.data[0])

        # Claimed by a sweep between the read and the update
        return await self.find_by_id(data.id)

    async def find_due(self, now_ms: int, limit: Optional[int] = None) -> List[ScheduledNotification]:
        """Pending records whose send time is at or before now_ms"""
        query = (
            self._table()
            .select("*")
            .eq("status", NotificationStatus.PENDING.value)
            .lte("send_at_ms", now_ms)
            .order("send_at_ms")
        )
        if limit:
            query = query.limit(limit)

        response = query.execute()
        return self._to_models(response.data or [])

    async def claim(self, notification_id: str, sweep_id: str, now_ms: int) -> Optional[ScheduledNotification]:
        """Lease a pending record for one sweep. Returns None if already claimed or terminal."""
        response = (
            self._table()
            .update({"claimed_by": sweep_id, "claimed_at_ms": now_ms})
            .eq("id", notification_id)
            .eq("status", NotificationStatus.PENDING.value)
            .is_("claimed_by", "null")
            .execute()
        )
        if not response.data:
            return None
        return self._to_model(response.data[0])

    async def mark_sent(self, notification_id: str, sweep_id: str) -> Optional[ScheduledNotification]:
        """pending -> sent, only for the sweep holding the claim"""
        return await self._finish(notification_id, sweep_id, {
            "status": NotificationStatus.SENT.value,
            "sent_at": datetime.now(timezone.utc).isoformat(),
        })

    async def mark_failed(self, notification_id: str, sweep_id: str, reason: str) -> Optional[ScheduledNotification]:
        """pending -> failed, only for the sweep holding the claim"""
        return await self._finish(notification_id, sweep_id, {
            "status": NotificationStatus.FAILED.value,
            "error_message": reason,
        })

    async def _finish(self, notification_id: str, sweep_id: str, update_data: dict) -> Optional[ScheduledNotification]:
        response = (
            self._table()
            .update(update_data)
            .eq("id", notification_id)
            .eq("status", NotificationStatus.PENDING.value)
            .eq("claimed_by", sweep_id)
            .execute()
        )
        if not response.data:
            return None
        return self._to_model(response.data[0])

    async def purge_older_than(self, cutoff_ms: int) -> int:
        """Delete every record created before cutoff_ms, whatever its status

        Returns:
            Number of deleted records
        """
        response = self._table().delete().lt("created_at_ms", cutoff_ms).execute()
        return len(response.data) if response.data else 0
