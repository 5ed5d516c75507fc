"""Services module"""

from rest_timer.services.delivery_worker import DeliveryWorker
from rest_timer.services.push_channel import (
    ExpoPushChannel,
    PushChannel,
    PushChannelRouter,
    WebPushChannel,
)
from rest_timer.services.rest_notification_service import RestNotificationService

__all__ = [
    "DeliveryWorker",
    "ExpoPushChannel",
    "PushChannel",
    "PushChannelRouter",
    "WebPushChannel",
    "RestNotificationService",
]
