"""Domain models for the application"""
from .scheduled_notification import (
    CancelRestNotificationRequest,
    DeliveryTarget,
    NotificationPayload,
    NotificationStatus,
    PlatformKind,
    ScheduledNotification,
    ScheduledNotificationCreate,
    ScheduleRestNotificationRequest,
    ScheduleRestNotificationResponse,
    SuccessResponse,
    SweepResult,
    ImmediateNotificationRequest,
)
from .push_subscription import PushSubscription, PushSubscriptionCreate, RegisterDeliveryTargetRequest
from .push_message import ExpoPushMessage, PushMessage

__all__ = [
    'CancelRestNotificationRequest', 'DeliveryTarget', 'NotificationPayload',
    'NotificationStatus', 'PlatformKind',
    'ScheduledNotification', 'ScheduledNotificationCreate',
    'ScheduleRestNotificationRequest', 'ScheduleRestNotificationResponse',
    'SuccessResponse', 'SweepResult', 'ImmediateNotificationRequest',
    'PushSubscription', 'PushSubscriptionCreate', 'RegisterDeliveryTargetRequest',
    'ExpoPushMessage', 'PushMessage',
]
