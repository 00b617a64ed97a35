# storefront/services/coupon_service.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable

from sqlalchemy.orm import Session

from storefront.data.models.coupon import CouponModel
from storefront.domain.errors import CouponRejection, RejectionReason
from storefront.repos.coupon_repo import CouponRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _as_utc(value: datetime) -> datetime:
    #sqlite hands back naive datetimes, they are stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class CouponService:
    """
    Resolves a coupon code against the current subtotal.
    Read-only, safe to call as often as the cart changes.
    """

    def __init__(self, db: Session, clock: Callable[[], datetime] | None = None):
        self.repo = CouponRepo(db)
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def validate(self, code: str, subtotal: Decimal) -> CouponModel:
        """
        Checks, in order: the code exists and is active, the subtotal reaches
        min_order_amount, valid_until has not passed. Raises CouponRejection
        on the first failed check.
        """
        coupon = self.repo.get_active_by_code(code or "")

        if not coupon:
            logger.info(f"Coupon {code!r} rejected: unknown or inactive")
            raise CouponRejection(RejectionReason.INVALID_CODE)

        if coupon.min_order_amount is not None and subtotal < Decimal(str(coupon.min_order_amount)):
            logger.info(f"Coupon {coupon.code} rejected: subtotal {subtotal} below {coupon.min_order_amount}")
            raise CouponRejection(RejectionReason.BELOW_MINIMUM, Decimal(str(coupon.min_order_amount)))

        if coupon.valid_until is not None and self.clock() > _as_utc(coupon.valid_until):
            logger.info(f"Coupon {coupon.code} rejected: expired at {coupon.valid_until}")
            raise CouponRejection(RejectionReason.EXPIRED)

        return coupon
