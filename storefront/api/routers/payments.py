# storefront/api/routers/payments.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import (
    current_user_id,
    get_confirmation_store,
    get_lock_service,
    get_notification_service,
)
from storefront.api.errors import http_error
from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import (
    ConfirmationOut,
    HandoffOut,
    OrderOut,
    PaymentInstructionsOut,
    ReferenceIn,
)
from storefront.services.confirmation_store import ConfirmationStore
from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService
from storefront.services.payment_service import PaymentService

router = APIRouter(prefix="/payments", tags=["payments"])


def get_service(
    db: Session = Depends(get_db),
    store: ConfirmationStore = Depends(get_confirmation_store),
    lock_service: LockService = Depends(get_lock_service),
    notification_service: NotificationService = Depends(get_notification_service),
):
    return PaymentService(
        db,
        store=store,
        lock_service=lock_service,
        notification_service=notification_service,
    )


@router.get("/{order_id}", response_model=PaymentInstructionsOut)
def payment_instructions(
    order_id: int,
    user_id: int | None = Depends(current_user_id),
    svc: PaymentService = Depends(get_service),
):
    try:
        return svc.get_instructions(order_id, user_id)
    except StorefrontError as e:
        raise http_error(e)


@router.get("/{order_id}/status", response_model=ConfirmationOut)
def confirmation_status(
    order_id: int,
    user_id: int | None = Depends(current_user_id),
    svc: PaymentService = Depends(get_service),
):
    try:
        return svc.get_status(order_id, user_id)
    except StorefrontError as e:
        raise http_error(e)


@router.post("/{order_id}/reference", response_model=HandoffOut)
def submit_reference(
    order_id: int,
    payload: ReferenceIn,
    user_id: int | None = Depends(current_user_id),
    svc: PaymentService = Depends(get_service),
):
    """
    Stores the UTR and returns the WhatsApp message + link for the operator.
    Settling starts now.
    """
    try:
        return svc.submit_reference(order_id, user_id, payload.reference)
    except StorefrontError as e:
        raise http_error(e)


@router.post("/{order_id}/complete", response_model=OrderOut)
def complete_payment(
    order_id: int,
    user_id: int | None = Depends(current_user_id),
    svc: PaymentService = Depends(get_service),
):
    try:
        return svc.complete(order_id, user_id)
    except StorefrontError as e:
        raise http_error(e)
