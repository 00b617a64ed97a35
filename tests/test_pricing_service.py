"""Tests for cart pricing: effective unit price, subtotal and coupon discounts."""

from decimal import Decimal

import pytest

from storefront.data.models import CartItemModel, CouponModel, ProductModel
from storefront.services import pricing_service


def _line(price, qty, offer=None):
    product = ProductModel(
        name="Oil",
        price_per_unit=Decimal(price),
        offer_price_per_unit=Decimal(offer) if offer is not None else None,
    )
    return CartItemModel(product=product, quantity=Decimal(qty))


def _coupon(discount_type, value, max_discount=None):
    return CouponModel(
        code="X",
        discount_type=discount_type,
        discount_value=Decimal(value),
        max_discount_amount=Decimal(max_discount) if max_discount is not None else None,
    )


def test_offer_price_used_when_lower():
    assert pricing_service.effective_unit_price(_line("500", "1", offer="450").product) == Decimal("450.00")


def test_offer_price_ignored_when_not_lower():
    assert pricing_service.effective_unit_price(_line("500", "1", offer="550").product) == Decimal("500.00")


def test_subtotal_sums_lines_with_fractional_quantities():
    items = [_line("500", "2"), _line("120", "1.5", offer="100")]
    assert pricing_service.subtotal(items) == Decimal("1150.00")


def test_no_coupon_means_no_discount():
    breakdown = pricing_service.price_cart([_line("500", "2")])
    assert breakdown.subtotal == Decimal("1000.00")
    assert breakdown.discount == Decimal("0.00")
    assert breakdown.final == Decimal("1000.00")


def test_percentage_discount_capped_by_max_discount():
    breakdown = pricing_service.price_cart([_line("1000", "1")], _coupon("percentage", "20", "150"))
    assert breakdown.discount == Decimal("150.00")
    assert breakdown.final == Decimal("850.00")


def test_percentage_discount_without_cap():
    breakdown = pricing_service.price_cart([_line("500", "2")], _coupon("percentage", "10"))
    assert (breakdown.subtotal, breakdown.discount, breakdown.final) == (
        Decimal("1000.00"),
        Decimal("100.00"),
        Decimal("900.00"),
    )


def test_fixed_discount_never_exceeds_subtotal():
    breakdown = pricing_service.price_cart([_line("150", "1")], _coupon("fixed", "200"))
    assert breakdown.discount == Decimal("150.00")
    assert breakdown.final == Decimal("0.00")


@pytest.mark.parametrize(
    "coupon",
    [None, ("percentage", "15", None), ("percentage", "50", "40"), ("fixed", "75", None), ("fixed", "5000", None)],
)
def test_final_is_subtotal_minus_discount_and_never_negative(coupon):
    items = [_line("199.99", "3"), _line("49.50", "0.5", offer="45")]
    resolved = _coupon(*coupon) if coupon else None

    breakdown = pricing_service.price_cart(items, resolved)

    assert breakdown.final == breakdown.subtotal - breakdown.discount
    assert Decimal("0") <= breakdown.discount <= breakdown.subtotal
    assert breakdown.final >= 0


def test_unknown_discount_type_is_rejected():
    with pytest.raises(ValueError):
        pricing_service.discount_for(_coupon("bogus", "10"), Decimal("100"))
