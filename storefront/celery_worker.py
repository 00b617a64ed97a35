# storefront/celery_worker.py
from celery import Celery

from storefront.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND

celery_app = Celery(
    "storefront",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

#import the task modules explicitly so the worker registers them
celery_app.conf.imports = (
    "storefront.tasks.expire",
    "storefront.services.notification_service",
)

celery_app.conf.beat_schedule = {
    "abandon-stale-orders-every-5-minutes": {
        "task": "storefront.tasks.expire.abandon_stale_orders_task",
        "schedule": 300.0,
    },
}

celery_app.conf.timezone = "UTC"
