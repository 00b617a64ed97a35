# storefront/domain/errors.py
from decimal import Decimal
from enum import Enum


class StorefrontError(Exception):
    """Base class for every error the checkout core raises on purpose."""


class AuthRequiredError(StorefrontError):
    def __init__(self, message: str = "Please login"):
        super().__init__(message)


class ForbiddenError(StorefrontError, PermissionError):
    pass


class ValidationError(StorefrontError, ValueError):
    pass


class EmptyCartError(StorefrontError, ValueError):
    def __init__(self, message: str = "Cart is empty"):
        super().__init__(message)


class NotFoundError(StorefrontError, LookupError):
    pass


class RejectionReason(str, Enum):
    INVALID_CODE = "invalid_code"
    BELOW_MINIMUM = "below_minimum"
    EXPIRED = "expired"


class CouponRejection(StorefrontError):
    """Coupon could not be applied. Shown next to the coupon field, checkout may go on without it."""

    def __init__(self, reason: RejectionReason, min_order_amount: Decimal | None = None):
        self.reason = reason
        self.min_order_amount = min_order_amount
        super().__init__(self._message())

    def _message(self) -> str:
        if self.reason == RejectionReason.BELOW_MINIMUM:
            return f"Minimum order amount is ₹{self.min_order_amount}"
        if self.reason == RejectionReason.EXPIRED:
            return "Coupon has expired"
        return "Invalid coupon code"


class InvalidTransitionError(StorefrontError):
    pass


class SettlingInProgressError(InvalidTransitionError):
    def __init__(self, remaining_seconds: float):
        self.remaining_seconds = remaining_seconds
        super().__init__(f"Payment is still settling, try again in {remaining_seconds:.1f}s")


class CheckoutInProgressError(StorefrontError):
    def __init__(self, message: str = "Another checkout request is already in progress"):
        super().__init__(message)


class StoreError(StorefrontError):
    """Failure of the underlying data store. The operation was aborted and rolled back."""
