"""
Delivery Worker

One sweep per invocation: claim each due pending notification, push it,
record the outcome, then purge records past the retention window. The worker
shares nothing with the local countdown except the durable store.
"""

import asyncio
import logging
import uuid
from typing import Callable, Optional

from rest_timer import config
from rest_timer.errors import DeliveryError, DeliveryTargetInvalid
from rest_timer.infra.supabase.repositories import RepositoryFactory
from rest_timer.models.push_message import PushMessage
from rest_timer.models.scheduled_notification import ScheduledNotification, SweepResult
from rest_timer.services.push_channel import PushChannelRouter
from rest_timer.utils.time_helper import now_ms

logger = logging.getLogger(__name__)


class DeliveryWorker:
    """Sends due rest notifications and retires stale ones"""

    def __init__(
        self,
        repositories: RepositoryFactory,
        channels: PushChannelRouter,
        clock: Callable[[], int] = now_ms,
        retention_seconds: int = config.RETENTION_SECONDS,
        max_concurrency: int = config.MAX_CONCURRENT_DELIVERIES,
        evict_invalid_targets: bool = config.EVICT_INVALID_TARGETS,
        icon: Optional[str] = config.PUSH_ICON,
    ):
        self.repositories = repositories
        self.channels = channels
        self.clock = clock
        self.retention_ms = retention_seconds * 1000
        self.max_concurrency = max_concurrency
        self.evict_invalid_targets = evict_invalid_targets
        self.icon = icon

    async def sweep(self, now: Optional[int] = None) -> SweepResult:
        """
        Run one delivery sweep.

        Args:
            now: Sweep instant in epoch ms (defaults to the clock)

        Returns:
            SweepResult with per-outcome counts
        """
        if now is None:
            now = self.clock()

        sweep_id = uuid.uuid4().hex
        result = SweepResult()
        repo = self.repositories.scheduled_notifications

        try:
            due = await repo.find_due(now)
        except Exception as e:
            logger.error(f"Sweep {sweep_id}: failed to query due notifications: {e}")
            result.errors["query"] = str(e)
            due = []

        result.due = len(due)
        if due:
            logger.info(f"📬 Found {len(due)} due notifications")
        else:
            logger.info("📭 No due notifications")

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def process_with_limit(record: ScheduledNotification):
            async with semaphore:
                try:
                    await self._process(record, sweep_id, now, result)
                except Exception as e:
                    # Store failures on one record must not stop the others
                    logger.error(f"Sweep {sweep_id}: error processing notification {record.id}: {e}")
                    result.errors[record.id] = str(e)

        await asyncio.gather(*(process_with_limit(record) for record in due))

        try:
            result.purged = await repo.purge_older_than(now - self.retention_ms)
        except Exception as e:
            logger.error(f"Sweep {sweep_id}: failed to purge old notifications: {e}")
            result.errors["purge"] = str(e)

        logger.info(
            f"Sweep {sweep_id} done: due={result.due}, sent={result.sent}, failed={result.failed}, "
            f"skipped={result.skipped}, purged={result.purged}"
        )
        return result

    async def _process(self, record: ScheduledNotification, sweep_id: str, now: int, result: SweepResult) -> None:
        repo = self.repositories.scheduled_notifications

        claimed = await repo.claim(record.id, sweep_id, now)
        if claimed is None:
            # Cancelled, finished or leased by an overlapping sweep
            result.skipped += 1
            return

        message = PushMessage.for_rest_timer(
            notification_id=claimed.id,
            title=claimed.payload.title,
            body=claimed.payload.body,
            icon=self.icon,
        )

        try:
            await self.channels.send(claimed.platform_kind, claimed.delivery_target, message)
        except DeliveryError as e:
            logger.error(f"❌ Failed to send notification {claimed.id}: {e}")
            if await repo.mark_failed(claimed.id, sweep_id, str(e)) is not None:
                result.failed += 1
            if isinstance(e, DeliveryTargetInvalid):
                result.invalid_targets += 1
                await self._retire_target(claimed)
            return
        except Exception as e:
            logger.error(f"❌ Unexpected error sending notification {claimed.id}: {e}")
            if await repo.mark_failed(claimed.id, sweep_id, str(e)) is not None:
                result.failed += 1
            return

        if await repo.mark_sent(claimed.id, sweep_id) is not None:
            result.sent += 1
            logger.info(f"✅ Sent notification: {claimed.id}")
        else:
            logger.warning(f"Notification {claimed.id} was delivered but its status changed concurrently")

    async def _retire_target(self, record: ScheduledNotification) -> None:
        logger.info(f"Subscription for user {record.owner_id} ({record.platform_kind.value}) expired or invalid")
        if not self.evict_invalid_targets:
            return

        try:
            removed = await self.repositories.push_subscriptions.delete_if_target(
                record.owner_id, record.platform_kind, record.delivery_target
            )
        except Exception as e:
            logger.error(f"Failed to remove invalid subscription for user {record.owner_id}: {e}")
            return

        if removed:
            logger.info(f"Removed invalid {record.platform_kind.value} subscription for user {record.owner_id}")

    async def run_forever(self, interval_seconds: int = config.SWEEP_INTERVAL_SECONDS) -> None:
        """Sweep on a fixed cadence until cancelled"""
        logger.info(f"Delivery worker started, sweeping every {interval_seconds}s")
        while True:
            await self.sweep()
            await asyncio.sleep(interval_seconds)
