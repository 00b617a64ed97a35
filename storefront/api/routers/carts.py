#storefront/api/routers/carts.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import current_user_id
from storefront.api.errors import http_error
from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import CartOut, CartReleaseOut, ItemIn
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("/", response_model=CartOut)
def get_cart(user_id: int | None = Depends(current_user_id), db: Session = Depends(get_db)):
    svc = CartService(db)
    try:
        return svc.get_cart(user_id)
    except StorefrontError as e:
        raise http_error(e)


@router.post("/items", response_model=CartOut)
def add_item(
    payload: ItemIn,
    user_id: int | None = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    try:
        return svc.add_product(
            user_id=user_id,
            product_id=payload.product_id,
            quantity=payload.quantity,
            variant_label=payload.variant_label,
            measurement_value=payload.measurement_value,
        )
    except StorefrontError as e:
        raise http_error(e)


@router.delete("/items/{product_id}", response_model=CartOut)
def remove_item(
    product_id: int,
    user_id: int | None = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    try:
        return svc.remove_product(user_id, product_id)
    except StorefrontError as e:
        raise http_error(e)


@router.delete("/", response_model=CartReleaseOut)
def clear_cart(user_id: int | None = Depends(current_user_id), db: Session = Depends(get_db)):
    svc = CartService(db)
    try:
        removed = svc.release_cart(user_id)
    except StorefrontError as e:
        raise http_error(e)
    return {"user_id": user_id, "removed": removed}
