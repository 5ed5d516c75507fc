# API module exports
from rest_timer.api import cron, health, rest_notifications
from rest_timer.api.base import api_router

__all__ = ["cron", "health", "rest_notifications", "api_router"]
