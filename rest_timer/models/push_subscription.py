from typing import Optional

from pydantic import BaseModel

from .scheduled_notification import DeliveryTarget, PlatformKind


class PushSubscriptionBase(BaseModel):
    """Base push subscription fields"""
    owner_id: str  # UUID as string
    platform_kind: PlatformKind
    delivery_target: DeliveryTarget


class PushSubscriptionCreate(PushSubscriptionBase):
    """Push subscription upsert model"""
    updated_at_ms: int


class PushSubscription(PushSubscriptionCreate):
    """Complete push subscription model from database"""

    class Config:
        from_attributes = True


class RegisterDeliveryTargetRequest(BaseModel):
    """Register (or replace) the delivery target for a platform"""
    deliveryTarget: Optional[DeliveryTarget] = None
    platformKind: PlatformKind = PlatformKind.WEB
