# storefront/api/routers/checkout.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import current_user_id, get_lock_service, get_notification_service
from storefront.api.errors import http_error
from storefront.data.database import get_db
from storefront.domain.errors import CouponRejection, EmptyCartError, StorefrontError
from storefront.domain.schemas import CheckoutIn, CouponIn, OrderOut, QuoteIn, QuoteOut
from storefront.services import pricing_service
from storefront.services.cart_service import CartService
from storefront.services.coupon_service import CouponService
from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/checkout", tags=["checkout"])


def _quote(db: Session, user_id: int | None, code: str | None, strict: bool) -> dict:
    items = CartService(db).get_items(user_id)
    if not items:
        raise EmptyCartError()

    coupon, coupon_error = None, None
    if code and code.strip():
        try:
            coupon = CouponService(db).validate(code, pricing_service.subtotal(items))
        except CouponRejection as e:
            if strict:
                raise
            coupon_error = str(e)

    breakdown = pricing_service.price_cart(items, coupon)
    return {
        "subtotal": breakdown.subtotal,
        "discount": breakdown.discount,
        "final": breakdown.final,
        "coupon": coupon,
        "coupon_error": coupon_error,
    }


@router.post("/quote", response_model=QuoteOut)
def quote(
    payload: QuoteIn,
    user_id: int | None = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    """
    Totals for the current cart. A rejected coupon is reported in coupon_error,
    the quote itself still goes through.
    """
    try:
        return _quote(db, user_id, payload.coupon_code, strict=False)
    except StorefrontError as e:
        raise http_error(e)


@router.post("/coupon", response_model=QuoteOut)
def apply_coupon(
    payload: CouponIn,
    user_id: int | None = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    try:
        return _quote(db, user_id, payload.code, strict=True)
    except StorefrontError as e:
        raise http_error(e)


@router.post("/orders", response_model=OrderOut, status_code=201)
def place_order(
    payload: CheckoutIn,
    user_id: int | None = Depends(current_user_id),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
    notification_service: NotificationService = Depends(get_notification_service),
):
    """
    Creates a pending order from the cart. Prices and the coupon are
    re-read now, whatever the user saw earlier.
    """
    svc = OrderService(db, lock_service=lock_service, notification_service=notification_service)
    try:
        return svc.create_order(user_id, payload.shipping_address, payload.coupon_code)
    except StorefrontError as e:
        raise http_error(e)
