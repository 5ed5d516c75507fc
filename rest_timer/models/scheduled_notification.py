from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field


# Web push subscription object or native device token
DeliveryTarget = Union[Dict[str, Any], str]


class PlatformKind(str, Enum):
    """Delivery platform of a push target"""
    WEB = "web"
    NATIVE = "native"


class NotificationStatus(str, Enum):
    """Scheduled notification status"""
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class NotificationPayload(BaseModel):
    """User-visible text of a rest notification"""
    title: str
    body: str
    subject: Optional[str] = None  # exercise name


class ScheduledNotificationCreate(BaseModel):
    """Scheduled notification creation model"""
    id: str
    owner_id: str
    delivery_target: DeliveryTarget
    platform_kind: PlatformKind = PlatformKind.WEB
    send_at_ms: int
    payload: NotificationPayload
    status: NotificationStatus = NotificationStatus.PENDING
    created_at_ms: int


class ScheduledNotification(ScheduledNotificationCreate):
    """Complete scheduled notification model from database"""
    sent_at: Optional[datetime] = None
    error_message: Optional[str] = None
    claimed_by: Optional[str] = None
    claimed_at_ms: Optional[int] = None

    class Config:
        from_attributes = True


class ScheduleRestNotificationRequest(BaseModel):
    """Request to schedule a rest-timer notification"""
    id: Optional[str] = None
    deliveryTarget: Optional[DeliveryTarget] = None
    platformKind: PlatformKind = PlatformKind.WEB
    sendAtEpochMs: Optional[int] = None
    durationSeconds: Optional[float] = None
    payloadTitle: Optional[str] = None
    payloadBody: Optional[str] = None
    exerciseName: Optional[str] = None


class ScheduleRestNotificationResponse(BaseModel):
    success: bool
    id: str
    sendAtEpochMs: int


class CancelRestNotificationRequest(BaseModel):
    id: Optional[str] = None


class SuccessResponse(BaseModel):
    success: bool


class ImmediateNotificationRequest(BaseModel):
    """Request for an immediate notification to the registered target"""
    title: Optional[str] = None
    body: Optional[str] = None
    platformKind: PlatformKind = PlatformKind.WEB


class SweepResult(BaseModel):
    """Outcome of one delivery sweep"""
    due: int = 0
    sent: int = 0
    failed: int = 0
    skipped: int = 0
    purged: int = 0
    invalid_targets: int = 0
    errors: Dict[str, str] = Field(default_factory=dict)
