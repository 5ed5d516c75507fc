from fastapi import APIRouter

from rest_timer.api import cron, health, rest_notifications

api_router = APIRouter()

# Include all sub-routers
api_router.include_router(rest_notifications.router)
api_router.include_router(cron.router)
api_router.include_router(health.router)
