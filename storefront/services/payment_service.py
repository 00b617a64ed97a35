# storefront/services/payment_service.py
from datetime import datetime, timezone
from typing import Any, Callable, Dict

from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.domain.errors import (
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    StoreError,
)
from storefront.domain.payment import ConfirmationState, PaymentConfirmation
from storefront.repos.order_repo import OrderRepo
from storefront.services import handoff_service
from storefront.services.cart_service import CartService, require_user
from storefront.services.confirmation_store import ConfirmationStore
from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService, dispatch_safely
from storefront.utils.settings import CURRENCY, PAYMENT_SETTLING_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class PaymentService:
    """
    Drives the manual UPI payment of one order:

    1. user pays via the UPI link / QR
    2. user submits the transaction reference, gets the WhatsApp hand-off, settling starts
    3. after the settling cooldown the user completes: payment attested, cart released
    4. the operator acknowledges out of band (OrderService.acknowledge_payment)
    """

    def __init__(
        self,
        db: Session,
        store: ConfirmationStore,
        lock_service: LockService,
        notification_service: NotificationService | None = None,
        clock: Callable[[], datetime] | None = None,
        settling_seconds: float = PAYMENT_SETTLING_SECONDS,
    ):
        self.repo = OrderRepo(db)
        self.carts = CartService(db)
        self.store = store
        self.lock_service = lock_service
        self.notification_service = notification_service or NotificationService()
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.settling_seconds = settling_seconds

    def _owned_order(self, order_id: int, user_id: int) -> OrderModel:
        require_user(user_id)

        order = self.repo.get_order(order_id)
        if not order:
            raise NotFoundError("Order not found")
        if order.user_id != user_id:
            raise ForbiddenError("No access to this order")
        return order

    def _session(self, order: OrderModel) -> PaymentConfirmation:
        session = self.store.load(order.id)
        if session is not None:
            return session

        if order.status != "pending" or order.payment_status != "pending":
            raise InvalidTransitionError(
                f"Order {order.label} is {order.status}/{order.payment_status}, payment cannot be confirmed"
            )

        return PaymentConfirmation(
            order_id=order.id,
            user_id=order.user_id,
            settling_seconds=self.settling_seconds,
        )

    def _view(self, session: PaymentConfirmation) -> Dict[str, Any]:
        now = self.clock()
        return {
            "order_id": session.order_id,
            "state": session.state.value,
            "reference": session.reference,
            "can_complete": session.can_complete(now),
            "remaining_seconds": session.remaining_seconds(now),
        }

    #queries
    def get_instructions(self, order_id: int, user_id: int) -> Dict[str, Any]:
        order = self._owned_order(order_id, user_id)
        return {
            "order_id": order.id,
            "order_label": order.label,
            "amount": order.final_amount,
            "discount_amount": order.discount_amount,
            "currency": CURRENCY,
            "upi_link": handoff_service.upi_deep_link(order),
            "qr_code_url": handoff_service.qr_code_url(order),
            "payment_status": order.payment_status,
        }

    def get_status(self, order_id: int, user_id: int) -> Dict[str, Any]:
        order = self._owned_order(order_id, user_id)

        # the order row wins over the redis session once it left pending/pending
        if order.payment_status != "pending":
            state = ConfirmationState.COMPLETED
        elif order.status != "pending":
            state = ConfirmationState.UNAVAILABLE
        else:
            session = self.store.load(order.id)
            if session is not None:
                return self._view(session)
            state = ConfirmationState.AWAITING_REFERENCE

        return self._view(
            PaymentConfirmation(
                order_id=order.id,
                user_id=order.user_id,
                settling_seconds=self.settling_seconds,
                state=state,
                reference=order.payment_reference,
            )
        )

    #commands
    def submit_reference(self, order_id: int, user_id: int, reference: str) -> Dict[str, Any]:
        """
        awaiting_reference -> reference_submitted -> settling.
        Builds the message for the operator, the order row is not touched.
        """
        order = self._owned_order(order_id, user_id)
        session = self._session(order)

        session.submit_reference(reference)
        message = handoff_service.confirmation_message(order, session.reference)
        link = handoff_service.whatsapp_link(message)

        session.begin_settling(self.clock())
        self.store.save(session)

        logger.info(f"Order {order.label}: reference submitted, settling for {self.settling_seconds}s")

        view = self._view(session)
        view.update({"message": message, "whatsapp_link": link})
        return view

    def complete(self, order_id: int, user_id: int) -> OrderModel:
        """
        settling -> completed, once the cooldown is over.
        Marks the payment attested and releases the cart in one transaction.
        """
        order = self._owned_order(order_id, user_id)
        if order.status != "pending":
            raise InvalidTransitionError(f"Order {order.label} is {order.status}, payment cannot be confirmed")

        session = self.store.load(order.id)
        if session is None:
            raise InvalidTransitionError("Submit the transaction reference first")

        now = self.clock()
        session.ensure_can_complete(now)

        with self.lock_service.guard(user_id, "payment"):
            try:
                rowcount = self.repo.update_payment_status(
                    order_id=order.id,
                    old_status="pending",
                    new_data={
                        "payment_status": "attested",
                        "payment_reference": session.reference,
                    },
                )
                if rowcount == 0:
                    # payment moved on or the sweep abandoned the order meanwhile
                    self.repo.rollback()
                    raise InvalidTransitionError(f"Order {order.label} is no longer awaiting payment")

                self.carts.release_cart(user_id, commit=False)
                self.repo.commit()
            except SQLAlchemyError as e:
                self.repo.rollback()
                logger.error(f"Completing payment of order {order.label} failed: {e}")
                raise StoreError("Could not complete the payment, nothing was saved") from e

        logger.info(f"Order {order.label}: payment attested with reference {session.reference}")

        # already committed, get_status reads the order row from here on
        session.complete(now)
        try:
            self.store.save(session)
        except RedisError as e:
            logger.warning(f"Failed to save completed confirmation of order {order.label}: {e}")

        dispatch_safely(self.notification_service, user_id, order.id, "payment attested")
        return self.repo.get_order(order.id)
