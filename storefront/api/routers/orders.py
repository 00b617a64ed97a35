# storefront/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import current_user_id, get_lock_service, get_notification_service
from storefront.api.errors import http_error
from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import OrderOut
from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
    notification_service: NotificationService = Depends(get_notification_service),
):
    return OrderService(db, lock_service=lock_service, notification_service=notification_service)


@router.get("/", response_model=List[OrderOut])
def list_orders(
    user_id: int | None = Depends(current_user_id),
    svc: OrderService = Depends(get_service),
):
    try:
        return svc.list_orders(user_id)
    except StorefrontError as e:
        raise http_error(e)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    user_id: int | None = Depends(current_user_id),
    svc: OrderService = Depends(get_service),
):
    """
    Order with its snapshot items. Owner or admin only.
    """
    try:
        return svc.get_order(order_id, user_id)
    except StorefrontError as e:
        raise http_error(e)


@router.post("/{order_id}/acknowledge", response_model=OrderOut)
def acknowledge_payment(
    order_id: int,
    user_id: int | None = Depends(current_user_id),
    svc: OrderService = Depends(get_service),
):
    """
    Operator confirms the UPI money arrived. Admin only.
    """
    try:
        return svc.acknowledge_payment(order_id, user_id)
    except StorefrontError as e:
        raise http_error(e)
