from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

REST_TIMER_KIND = "rest-timer"


class PushMessage(BaseModel):
    """Push payload delivered to the device"""
    title: str
    body: str
    icon: Optional[str] = None
    badge: Optional[str] = None
    tag: str = REST_TIMER_KIND
    data: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def for_rest_timer(cls, notification_id: str, title: str, body: str, icon: Optional[str] = None) -> "PushMessage":
        return cls(
            title=title,
            body=body,
            icon=icon,
            badge=icon,
            tag=REST_TIMER_KIND,
            data={"kind": REST_TIMER_KIND, "notificationId": notification_id},
        )


class ExpoPushMessage(BaseModel):
    """Expo push notification message format"""
    to: str
    title: str
    body: str
    data: Optional[Dict[str, Any]] = None
    sound: str = "default"
    priority: str = "high"
    channelId: str = "default"
