"""Error taxonomy for scheduling and delivering rest notifications"""
from typing import Optional


class RestTimerError(Exception):
    """Base class for rest-timer errors"""


class ValidationError(RestTimerError, ValueError):
    """Scheduling request is missing required fields; nothing was persisted"""


class AuthorizationError(RestTimerError):
    """Caller is not authenticated or does not own the record"""


class StoreUnavailable(RestTimerError):
    """Durable store could not be reached"""


class DeliveryError(RestTimerError):
    """Push channel refused or failed to deliver a message"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DeliveryTargetInvalid(DeliveryError):
    """Push channel reports the delivery target no longer exists"""


class TransientDeliveryError(DeliveryError):
    """Network or channel failure; the target itself may still be valid"""
