# storefront/services/pricing_service.py
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.coupon import CouponModel
from storefront.data.models.product import ProductModel

ZERO = Decimal("0.00")
_CENT = Decimal("0.01")

PERCENTAGE = "percentage"
FIXED = "fixed"


def money(value) -> Decimal:
    return Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal: Decimal
    discount: Decimal
    final: Decimal


def effective_unit_price(product: ProductModel) -> Decimal:
    # offer price wins only when it really is a discount
    price = Decimal(str(product.price_per_unit))
    offer = product.offer_price_per_unit
    if offer is not None and Decimal(str(offer)) < price:
        return money(offer)
    return money(price)


def line_total(item: CartItemModel) -> Decimal:
    return money(effective_unit_price(item.product) * Decimal(str(item.quantity)))


def subtotal(items: Iterable[CartItemModel]) -> Decimal:
    return sum((line_total(i) for i in items), ZERO)


def discount_for(coupon: CouponModel | None, amount: Decimal) -> Decimal:
    if coupon is None or amount <= ZERO:
        return ZERO

    value = Decimal(str(coupon.discount_value))

    if coupon.discount_type == PERCENTAGE:
        discount = amount * value / Decimal(100)
        if coupon.max_discount_amount is not None:
            discount = min(discount, Decimal(str(coupon.max_discount_amount)))
    elif coupon.discount_type == FIXED:
        discount = value
    else:
        raise ValueError(f"Unknown discount type {coupon.discount_type!r}")

    # never let the total go negative
    return money(min(max(discount, ZERO), amount))


def price_cart(items: Iterable[CartItemModel], coupon: CouponModel | None = None) -> PriceBreakdown:
    """Pure computation of subtotal, discount and final amount for the cart lines."""
    sub = subtotal(items)
    discount = discount_for(coupon, sub)
    return PriceBreakdown(subtotal=sub, discount=discount, final=money(sub - discount))
