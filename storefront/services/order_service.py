# storefront/services/order_service.py
import random
import time
from datetime import datetime, timezone, timedelta
from typing import Callable, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.domain.errors import (
    EmptyCartError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.repos.user_repo import UserRepo
from storefront.services import pricing_service
from storefront.services.cart_service import require_user
from storefront.services.coupon_service import CouponService
from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService, dispatch_safely
from storefront.utils.settings import MIN_ADDRESS_LENGTH, PENDING_ORDER_TTL_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def generate_order_number() -> str:
    return f"ORD-{int(time.time() * 1000)}-{random.randint(0, 999):03d}"


class OrderService:
    """
    Turns the cart into an order and owns the order lifecycle afterwards.
    Orders are only created here, their rows are never deleted.
    """

    def __init__(
        self,
        db: Session,
        lock_service: LockService,
        notification_service: NotificationService | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.db = db
        self.repo = OrderRepo(db)
        self.cart_repo = CartRepo(db)
        self.users = UserRepo(db)
        self.lock_service = lock_service
        self.notification_service = notification_service or NotificationService()
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.coupons = CouponService(db, clock=self.clock)

    #commands
    def create_order(self, user_id: int, shipping_address: str, coupon_code: str | None = None) -> OrderModel:
        """
        Use case: place an order from the user's cart.

        1. Validates identity, address and cart
        2. Re-reads product prices and the coupon, prices the cart
        3. Inserts the order and one snapshot item per cart line in ONE transaction
        4. Queues a notification

        The cart is left alone, it is released when the payment is attested.
        """
        require_user(user_id)

        address = (shipping_address or "").strip()
        if len(address) < MIN_ADDRESS_LENGTH:
            raise ValidationError(f"Address must be at least {MIN_ADDRESS_LENGTH} characters")

        with self.lock_service.guard(user_id, "checkout"):
            order = self._assemble(user_id, address, coupon_code)

        logger.info(
            f"Order {order.order_number} created for user {user_id}: "
            f"subtotal={order.total_amount} discount={order.discount_amount} final={order.final_amount}"
        )
        dispatch_safely(self.notification_service, user_id, order.id, "created")
        return order

    def _assemble(self, user_id: int, address: str, coupon_code: str | None) -> OrderModel:
        #fresh read, this is the moment prices get frozen
        items = self.cart_repo.get_cart_items(user_id)
        if not items:
            raise EmptyCartError()

        inactive = [i.product.name for i in items if not i.product.is_active]
        if inactive:
            raise ValidationError(f"No longer available: {', '.join(inactive)}")

        coupon = None
        if coupon_code and coupon_code.strip():
            subtotal = pricing_service.subtotal(items)
            coupon = self.coupons.validate(coupon_code, subtotal)

        breakdown = pricing_service.price_cart(items, coupon)

        order_number = generate_order_number()
        while self.repo.order_number_exists(order_number):
            order_number = generate_order_number()

        try:
            order = self.repo.add_order(
                OrderModel(
                    order_number=order_number,
                    user_id=user_id,
                    total_amount=breakdown.subtotal,
                    discount_amount=breakdown.discount,
                    final_amount=breakdown.final,
                    coupon_code=coupon.code if coupon else None,
                    shipping_address=address,
                    status="pending",
                    payment_status="pending",
                )
            )

            self.repo.add_order_items(
                [
                    OrderItemModel(
                        order_id=order.id,
                        product_id=i.product_id,
                        product_name=i.product.name,
                        quantity=i.quantity,
                        price_per_unit=pricing_service.effective_unit_price(i.product),
                        total_price=pricing_service.line_total(i),
                        variant_selection=i.variant_selection,
                        measurement_label=i.measurement_label or i.product.measurement_title,
                        measurement_value=i.measurement_value,
                    )
                    for i in items
                ]
            )

            self.repo.commit()
        except SQLAlchemyError as e:
            # order and items land together or not at all
            self.repo.rollback()
            logger.error(f"Order creation for user {user_id} rolled back: {e}")
            raise StoreError("Could not create the order, nothing was saved") from e

        return self.repo.get_order(order.id)

    def acknowledge_payment(self, order_id: int, operator_id: int) -> OrderModel:
        """
        Use case: operator saw the money arrive and settles the order.
        attested -> completed, pending -> confirmed.
        """
        require_user(operator_id)
        if not self.users.is_admin(operator_id):
            raise ForbiddenError("Only administrators can acknowledge payments")

        order = self.repo.get_order(order_id)
        if not order:
            raise NotFoundError("Order not found")

        if order.payment_status != "attested":
            raise InvalidTransitionError(
                f"Order {order.order_number} payment is {order.payment_status}, expected attested"
            )

        try:
            rowcount = self.repo.update_payment_status(
                order_id=order_id,
                old_status="attested",
                new_data={"payment_status": "completed", "status": "confirmed"},
            )
            if rowcount == 0:
                self.repo.rollback()
                raise InvalidTransitionError("Order payment status changed concurrently")
            self.repo.commit()
        except SQLAlchemyError as e:
            self.repo.rollback()
            raise StoreError("Could not acknowledge the payment") from e

        logger.info(f"Order {order.order_number} payment acknowledged by operator {operator_id}")
        dispatch_safely(self.notification_service, order.user_id, order_id, "confirmed")
        return self.repo.get_order(order_id)

    def abandon_stale_orders(self, now: datetime | None = None) -> List[int]:
        """Marks orders that never got a payment attestation as abandoned."""
        now = now or self.clock()
        cutoff = now - timedelta(seconds=PENDING_ORDER_TTL_SECONDS)

        try:
            abandoned = self.repo.mark_stale_pending_abandoned(cutoff)
            self.repo.commit()
        except SQLAlchemyError as e:
            self.repo.rollback()
            raise StoreError("Could not sweep stale orders") from e

        logger.info(f"Marked {len(abandoned)} stale pending order(s) as abandoned")
        return abandoned

    #queries
    def get_order(self, order_id: int, user_id: int) -> OrderModel:
        require_user(user_id)

        order = self.repo.get_order(order_id)
        if not order:
            raise NotFoundError("Order not found")

        if order.user_id != user_id and not self.users.is_admin(user_id):
            raise ForbiddenError("No access to this order")

        return order

    def list_orders(self, user_id: int) -> List[OrderModel]:
        return self.repo.list_orders(require_user(user_id))
