"""
Rest Notification API Endpoints

Called by the workout client when a rest timer starts, is skipped, or when
the device registers for push.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from rest_timer.api.deps import get_rest_notification_service
from rest_timer.auth import get_current_user_id
from rest_timer.errors import AuthorizationError, DeliveryError, StoreUnavailable, ValidationError
from rest_timer.models.push_subscription import RegisterDeliveryTargetRequest
from rest_timer.models.scheduled_notification import (
    CancelRestNotificationRequest,
    ImmediateNotificationRequest,
    ScheduleRestNotificationRequest,
    ScheduleRestNotificationResponse,
    SuccessResponse,
)
from rest_timer.services.rest_notification_service import RestNotificationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/rest-notifications", tags=["rest-notifications"])


def _to_http_error(e: Exception) -> HTTPException:
    if isinstance(e, ValidationError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, AuthorizationError):
        return HTTPException(status_code=403, detail=str(e))
    if isinstance(e, StoreUnavailable):
        return HTTPException(status_code=503, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))


@router.post("/schedule", response_model=ScheduleRestNotificationResponse)
async def schedule_rest_notification(
    request: ScheduleRestNotificationRequest,
    user_id: str = Depends(get_current_user_id),
    service: RestNotificationService = Depends(get_rest_notification_service),
):
    """
    Schedule a push notification for the end of a rest period.

    The notification is stored as pending and sent by the delivery sweep once
    its send time has passed, even if the app is backgrounded or locked.
    """
    try:
        return await service.schedule(user_id, request)
    except Exception as e:
        logger.error(f"Error scheduling notification {request.id} for user {user_id}: {str(e)}")
        raise _to_http_error(e)


@router.post("/cancel", response_model=SuccessResponse)
async def cancel_rest_notification(
    request: CancelRestNotificationRequest,
    user_id: str = Depends(get_current_user_id),
    service: RestNotificationService = Depends(get_rest_notification_service),
):
    """Cancel a scheduled notification (timer skipped or superseded). Idempotent."""
    try:
        await service.cancel(user_id, request.id)
        return SuccessResponse(success=True)
    except Exception as e:
        logger.error(f"Error cancelling notification {request.id}: {str(e)}")
        raise _to_http_error(e)


@router.post("/subscriptions", response_model=SuccessResponse)
async def register_delivery_target(
    request: RegisterDeliveryTargetRequest,
    user_id: str = Depends(get_current_user_id),
    service: RestNotificationService = Depends(get_rest_notification_service),
):
    """Store the push subscription or device token for this user and platform"""
    try:
        await service.register_target(user_id, request.deliveryTarget, request.platformKind)
        return SuccessResponse(success=True)
    except Exception as e:
        logger.error(f"Error saving push subscription for user {user_id}: {str(e)}")
        raise _to_http_error(e)


@router.post("/test", response_model=SuccessResponse)
async def send_test_notification(
    request: ImmediateNotificationRequest,
    user_id: str = Depends(get_current_user_id),
    service: RestNotificationService = Depends(get_rest_notification_service),
):
    """Send a notification immediately to the registered target"""
    try:
        await service.send_immediate(user_id, request.platformKind, request.title, request.body)
        return SuccessResponse(success=True)
    except DeliveryError as e:
        logger.error(f"Failed to send immediate notification: {str(e)}")
        raise HTTPException(status_code=502, detail="Failed to send notification")
    except Exception as e:
        raise _to_http_error(e)
