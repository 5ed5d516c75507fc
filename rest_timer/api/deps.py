"""Shared FastAPI dependencies"""
from functools import lru_cache

from rest_timer.infra.supabase import get_supabase_client
from rest_timer.infra.supabase.repositories import RepositoryFactory
from rest_timer.services.delivery_worker import DeliveryWorker
from rest_timer.services.push_channel import PushChannelRouter
from rest_timer.services.rest_notification_service import RestNotificationService


def get_repositories() -> RepositoryFactory:
    return RepositoryFactory(get_supabase_client())


@lru_cache(maxsize=1)
def get_push_channels() -> PushChannelRouter:
    return PushChannelRouter()


def get_rest_notification_service() -> RestNotificationService:
    return RestNotificationService(get_repositories(), channels=get_push_channels())


def get_delivery_worker() -> DeliveryWorker:
    return DeliveryWorker(get_repositories(), get_push_channels())
