"""Endpoints triggered by the external scheduler"""
import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException

from rest_timer import config
from rest_timer.api.deps import get_delivery_worker
from rest_timer.models.scheduled_notification import SweepResult
from rest_timer.services.delivery_worker import DeliveryWorker

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cron", tags=["cron"])


def verify_cron_secret(x_cron_secret: Optional[str] = Header(None)) -> None:
    if not config.CRON_SECRET:
        return
    if not x_cron_secret or not secrets.compare_digest(x_cron_secret, config.CRON_SECRET):
        raise HTTPException(status_code=401, detail="Invalid cron secret")


@router.post("/send-due-notifications", response_model=SweepResult, dependencies=[Depends(verify_cron_secret)])
async def send_due_notifications(worker: DeliveryWorker = Depends(get_delivery_worker)):
    """Run one delivery sweep (intended to be called every minute)"""
    logger.info("🔄 CRON: Starting send-due-notifications")
    return await worker.sweep()
