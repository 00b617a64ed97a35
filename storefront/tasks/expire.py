# storefront/tasks/expire.py
from storefront.celery_worker import celery_app
from storefront.data.database import SessionLocal
from storefront.services.order_service import OrderService
from storefront.services.lock_service import LockService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@celery_app.task(name="storefront.tasks.expire.abandon_stale_orders_task")
def abandon_stale_orders_task():
    logger.info("Abandon stale orders task started")

    db = SessionLocal()
    try:
        svc = OrderService(db, lock_service=LockService())
        abandoned = svc.abandon_stale_orders()
        return {"abandoned": abandoned}
    finally:
        db.close()
