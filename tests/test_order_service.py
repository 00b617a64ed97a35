"""Tests for order assembly, snapshots, access rules and operator acknowledgment."""

from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from storefront.data.models import CartItemModel, OrderItemModel, OrderModel
from storefront.domain.errors import (
    AuthRequiredError,
    CheckoutInProgressError,
    CouponRejection,
    EmptyCartError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    RejectionReason,
    StoreError,
    ValidationError,
)
from storefront.services.order_service import OrderService, generate_order_number
from tests.factories import make_coupon, make_product, make_user, put_in_cart

ADDRESS = "12 MG Road, Bengaluru 560001"


@pytest.fixture()
def user(db):
    return make_user(db)


@pytest.fixture()
def service(db, lock_service, notifier, clock):
    return OrderService(db, lock_service=lock_service, notification_service=notifier, clock=clock)


def test_save10_scenario(db, user, service, notifier):
    product = make_product(db, price="500.00")
    put_in_cart(db, user.id, product, quantity="2")
    make_coupon(db, code="SAVE10", value="10")

    order = service.create_order(user.id, ADDRESS, "save10")

    assert order.total_amount == Decimal("1000.00")
    assert order.discount_amount == Decimal("100.00")
    assert order.final_amount == Decimal("900.00")
    assert order.coupon_code == "SAVE10"
    assert order.status == "pending"
    assert order.payment_status == "pending"
    assert order.shipping_address == ADDRESS
    assert order.order_number.startswith("ORD-")

    assert len(order.items) == 1
    item = order.items[0]
    assert item.product_name == product.name
    assert item.quantity == Decimal("2")
    assert item.price_per_unit == Decimal("500.00")
    assert item.total_price == Decimal("1000.00")

    notifier.send_order_notification.assert_called_once_with(user.id, order.id, "created")


def test_order_item_uses_lower_offer_price_and_stays_frozen(db, user, service):
    product = make_product(db, price="500.00", offer="420.00")
    put_in_cart(db, user.id, product, quantity="1.5")

    order = service.create_order(user.id, ADDRESS)
    assert order.items[0].price_per_unit == Decimal("420.00")
    assert order.items[0].total_price == Decimal("630.00")

    product.price_per_unit = Decimal("900.00")
    product.offer_price_per_unit = None
    product.name = "Renamed"
    db.commit()

    reloaded = service.get_order(order.id, user.id)
    assert reloaded.items[0].price_per_unit == Decimal("420.00")
    assert reloaded.items[0].total_price == Decimal("630.00")
    assert reloaded.items[0].product_name == "Engine Oil"
    assert reloaded.total_amount == Decimal("630.00")


def test_selection_is_snapshotted(db, user, service):
    product = make_product(db, measurement_title="Pack size", measurement_values=["1L", "5L"])
    put_in_cart(
        db,
        user.id,
        product,
        variant_selection={"label": "Red", "image": None},
        measurement_value="5L",
    )

    item = service.create_order(user.id, ADDRESS).items[0]

    assert item.variant_selection == {"label": "Red", "image": None}
    assert item.measurement_label == "Pack size"
    assert item.measurement_value == "5L"


def test_empty_cart_creates_no_order(db, user, service, notifier):
    with pytest.raises(EmptyCartError):
        service.create_order(user.id, ADDRESS)
    assert db.query(OrderModel).count() == 0
    notifier.send_order_notification.assert_not_called()


def test_short_address_rejected(db, user, service):
    put_in_cart(db, user.id, make_product(db))
    with pytest.raises(ValidationError):
        service.create_order(user.id, "  short   ")
    assert db.query(OrderModel).count() == 0


def test_anonymous_checkout_rejected(service):
    with pytest.raises(AuthRequiredError):
        service.create_order(None, ADDRESS)


def test_inactive_product_blocks_checkout(db, user, service):
    product = make_product(db)
    put_in_cart(db, user.id, product)
    product.is_active = False
    db.commit()

    with pytest.raises(ValidationError, match="Engine Oil"):
        service.create_order(user.id, ADDRESS)


def test_coupon_rechecked_against_fresh_subtotal(db, user, service):
    product = make_product(db, price="100.00")
    put_in_cart(db, user.id, product, quantity="1")
    make_coupon(db, code="FLAT200", discount_type="fixed", value="200", min_order_amount=Decimal("150"))

    with pytest.raises(CouponRejection) as exc:
        service.create_order(user.id, ADDRESS, "FLAT200")
    assert exc.value.reason == RejectionReason.BELOW_MINIMUM
    assert db.query(OrderModel).count() == 0


def test_expired_coupon_rejected_at_checkout(db, user, service, clock):
    put_in_cart(db, user.id, make_product(db))
    make_coupon(db, code="OLD", valid_until=clock() - timedelta(minutes=1))

    with pytest.raises(CouponRejection) as exc:
        service.create_order(user.id, ADDRESS, "OLD")
    assert exc.value.reason == RejectionReason.EXPIRED


def test_cart_is_kept_until_payment(db, user, service):
    put_in_cart(db, user.id, make_product(db))
    service.create_order(user.id, ADDRESS)
    assert db.query(CartItemModel).filter_by(user_id=user.id).count() == 1


def test_failed_item_insert_leaves_no_orphan_order(db, user, service):
    put_in_cart(db, user.id, make_product(db))

    with patch.object(service.repo, "add_order_items", side_effect=SQLAlchemyError("boom")):
        with pytest.raises(StoreError):
            service.create_order(user.id, ADDRESS)

    assert db.query(OrderModel).count() == 0
    assert db.query(OrderItemModel).count() == 0


def test_broker_outage_does_not_fail_a_saved_order(db, user, service, notifier):
    put_in_cart(db, user.id, make_product(db))
    notifier.send_order_notification.side_effect = ConnectionError("broker down")

    order = service.create_order(user.id, ADDRESS)

    assert order.id
    assert order.status == "pending"
    assert db.query(OrderModel).count() == 1
    notifier.send_order_notification.assert_called_once_with(user.id, order.id, "created")


def test_duplicate_submission_refused(db, user, service, lock_service):
    put_in_cart(db, user.id, make_product(db))

    with lock_service.guard(user.id, "checkout"):
        with pytest.raises(CheckoutInProgressError):
            service.create_order(user.id, ADDRESS)

    # lock released, next attempt goes through
    assert service.create_order(user.id, ADDRESS).id


def test_lock_released_after_failure(db, user, service, redis_client):
    with pytest.raises(EmptyCartError):
        service.create_order(user.id, ADDRESS)
    assert redis_client.data == {}


def test_order_numbers_are_unique():
    numbers = {generate_order_number() for _ in range(50)}
    assert all(n.startswith("ORD-") for n in numbers)


def test_get_order_restricted_to_owner_and_admin(db, user, service):
    stranger = make_user(db, user_id=2, name="Stranger")
    admin = make_user(db, user_id=3, name="Operator", is_admin=True)
    put_in_cart(db, user.id, make_product(db))
    order = service.create_order(user.id, ADDRESS)

    with pytest.raises(ForbiddenError):
        service.get_order(order.id, stranger.id)
    assert service.get_order(order.id, admin.id).id == order.id

    with pytest.raises(NotFoundError):
        service.get_order(999, user.id)


def test_list_orders_newest_first(db, user, service, clock):
    product = make_product(db)
    put_in_cart(db, user.id, product)
    first = service.create_order(user.id, ADDRESS)
    second = service.create_order(user.id, ADDRESS)

    assert [o.id for o in service.list_orders(user.id)] == [second.id, first.id]


def test_acknowledge_requires_admin_and_attested_payment(db, user, service):
    admin = make_user(db, user_id=9, name="Operator", is_admin=True)
    put_in_cart(db, user.id, make_product(db))
    order = service.create_order(user.id, ADDRESS)

    with pytest.raises(ForbiddenError):
        service.acknowledge_payment(order.id, user.id)

    with pytest.raises(InvalidTransitionError):
        service.acknowledge_payment(order.id, admin.id)

    order.payment_status = "attested"
    db.commit()

    acknowledged = service.acknowledge_payment(order.id, admin.id)
    assert acknowledged.payment_status == "completed"
    assert acknowledged.status == "confirmed"


def test_stale_pending_orders_are_abandoned(db, user, service, clock):
    put_in_cart(db, user.id, make_product(db))
    stale = service.create_order(user.id, ADDRESS)
    fresh = service.create_order(user.id, ADDRESS)
    paid = service.create_order(user.id, ADDRESS)

    stale.created_at = clock() - timedelta(days=2)
    paid.created_at = clock() - timedelta(days=2)
    paid.payment_status = "attested"
    db.commit()

    assert service.abandon_stale_orders(clock()) == [stale.id]

    assert service.get_order(stale.id, user.id).status == "abandoned"
    assert service.get_order(fresh.id, user.id).status == "pending"
    assert service.get_order(paid.id, user.id).status == "pending"
