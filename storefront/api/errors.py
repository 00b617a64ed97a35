# storefront/api/errors.py
from fastapi import HTTPException

from storefront.domain.errors import (
    AuthRequiredError,
    CheckoutInProgressError,
    CouponRejection,
    EmptyCartError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    SettlingInProgressError,
    StoreError,
    StorefrontError,
    ValidationError,
)


def http_error(e: StorefrontError) -> HTTPException:
    if isinstance(e, AuthRequiredError):
        return HTTPException(status_code=401, detail=str(e))
    if isinstance(e, ForbiddenError):
        return HTTPException(status_code=403, detail=str(e))
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, ValidationError):
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, EmptyCartError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, CouponRejection):
        return HTTPException(
            status_code=400,
            detail={
                "reason": e.reason.value,
                "message": str(e),
                "min_order_amount": str(e.min_order_amount) if e.min_order_amount is not None else None,
            },
        )
    if isinstance(e, SettlingInProgressError):
        return HTTPException(
            status_code=409,
            detail={"message": str(e), "remaining_seconds": e.remaining_seconds},
        )
    if isinstance(e, (InvalidTransitionError, CheckoutInProgressError)):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, StoreError):
        return HTTPException(status_code=503, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))
