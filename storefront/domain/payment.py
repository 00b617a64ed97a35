# storefront/domain/payment.py
from datetime import datetime
from enum import Enum

from pydantic import BaseModel

from storefront.domain.errors import (
    InvalidTransitionError,
    SettlingInProgressError,
    ValidationError,
)


class ConfirmationState(str, Enum):
    AWAITING_REFERENCE = "awaiting_reference"
    REFERENCE_SUBMITTED = "reference_submitted"
    SETTLING = "settling"
    COMPLETED = "completed"
    #reporting only: the order left pending without a payment (abandoned), no transition leads here
    UNAVAILABLE = "unavailable"


class PaymentConfirmation(BaseModel):
    """
    Manual payment confirmation for one order.

    awaiting_reference -> reference_submitted -> settling -> completed

    The user pays out of band (UPI), types the transaction reference and sends
    the prefilled message to the operator. Completion is only allowed once the
    settling cooldown has elapsed. Nothing here is verified against a gateway,
    it is the user's attestation.
    """

    order_id: int
    user_id: int
    settling_seconds: float
    state: ConfirmationState = ConfirmationState.AWAITING_REFERENCE
    reference: str | None = None
    settling_started_at: datetime | None = None
    completed_at: datetime | None = None

    def submit_reference(self, reference: str) -> None:
        if self.state != ConfirmationState.AWAITING_REFERENCE:
            raise InvalidTransitionError(
                f"Cannot submit a reference while payment is {self.state.value}"
            )

        reference = (reference or "").strip()
        if not reference:
            raise ValidationError("Transaction reference is required")

        self.reference = reference
        self.state = ConfirmationState.REFERENCE_SUBMITTED

    def begin_settling(self, now: datetime) -> None:
        if self.state != ConfirmationState.REFERENCE_SUBMITTED:
            raise InvalidTransitionError(
                f"Cannot start settling while payment is {self.state.value}"
            )
        self.state = ConfirmationState.SETTLING
        self.settling_started_at = now

    def remaining_seconds(self, now: datetime) -> float:
        if self.state != ConfirmationState.SETTLING:
            return 0.0
        elapsed = (now - self.settling_started_at).total_seconds()
        return max(0.0, self.settling_seconds - elapsed)

    def can_complete(self, now: datetime) -> bool:
        return self.state == ConfirmationState.SETTLING and self.remaining_seconds(now) == 0.0

    def ensure_can_complete(self, now: datetime) -> None:
        if self.state != ConfirmationState.SETTLING:
            raise InvalidTransitionError(f"Cannot complete payment while it is {self.state.value}")

        remaining = self.remaining_seconds(now)
        if remaining > 0:
            raise SettlingInProgressError(remaining)

    def complete(self, now: datetime) -> None:
        self.ensure_can_complete(now)
        self.state = ConfirmationState.COMPLETED
        self.completed_at = now
