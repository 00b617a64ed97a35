from decimal import Decimal

from storefront.data.models import CartItemModel, CouponModel, ProductModel, UserModel


def make_user(db, user_id=1, name="Asha", is_admin=False):
    user = UserModel(id=user_id, name=name, is_admin=is_admin)
    db.add(user)
    db.commit()
    return user


def make_product(db, name="Engine Oil", price="500.00", offer=None, **kwargs):
    product = ProductModel(
        name=name,
        price_per_unit=Decimal(price),
        offer_price_per_unit=Decimal(offer) if offer is not None else None,
        stock_quantity=kwargs.pop("stock_quantity", Decimal("100")),
        **kwargs,
    )
    db.add(product)
    db.commit()
    return product


def make_coupon(db, code="SAVE10", discount_type="percentage", value="10", **kwargs):
    coupon = CouponModel(
        code=code,
        discount_type=discount_type,
        discount_value=Decimal(value),
        **kwargs,
    )
    db.add(coupon)
    db.commit()
    return coupon


def put_in_cart(db, user_id, product, quantity="1", **kwargs):
    item = CartItemModel(
        user_id=user_id,
        product_id=product.id,
        quantity=Decimal(quantity),
        **kwargs,
    )
    db.add(item)
    db.commit()
    return item
