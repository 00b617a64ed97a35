# storefront/api/deps.py
from fastapi import Query

from storefront.services.confirmation_store import ConfirmationStore
from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService


def current_user_id(user_id: int | None = Query(None, description="Supplied by the auth gateway")) -> int | None:
    # None is passed through, the services answer it with AuthRequiredError
    return user_id


def get_lock_service() -> LockService:
    return LockService()


def get_confirmation_store() -> ConfirmationStore:
    return ConfirmationStore()


def get_notification_service() -> NotificationService:
    return NotificationService()
