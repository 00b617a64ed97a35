# storefront/services/notification_service.py
from storefront.celery_worker import celery_app
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Order lifecycle notifications.
    Queued on Celery so a slow channel never holds up checkout.
    """

    @staticmethod
    def send_order_notification(user_id: int, order_id: int, event: str):
        send_order_notification_task.delay(user_id, order_id, event)


@celery_app.task(name="storefront.services.notification_service.send_order_notification_task")
def send_order_notification_task(user_id: int, order_id: int, event: str):
    """
    Only logs for now, the operator reads the WhatsApp thread.
    """
    logger.info(f"[NOTIFICATION] User {user_id}: order {order_id} {event}")
    return {"user_id": user_id, "order_id": order_id, "event": event, "status": "sent"}


def dispatch_safely(notification_service: NotificationService, user_id: int, order_id: int, event: str) -> bool:
    """
    Queues the notification after the use case already committed.
    A broker outage is logged, it must not turn a saved order into a reported failure.
    """
    try:
        notification_service.send_order_notification(user_id, order_id, event)
        return True
    except Exception as e:
        logger.warning(f"Failed to queue notification '{event}' for order {order_id}: {e}")
        return False
