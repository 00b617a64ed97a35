# storefront/data/seed.py
from datetime import datetime, timezone, timedelta
from decimal import Decimal

from storefront.data.database import SessionLocal, init_db
from storefront.data.models import CouponModel, ProductModel, UserModel
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def seed():
    init_db()
    db = SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.query(ProductModel).first():
            return

        db.add_all(
            [
                UserModel(id=1, name="Demo customer"),
                UserModel(id=2, name="Store operator", is_admin=True),
                ProductModel(
                    name="Engine Oil 5W-30",
                    price_per_unit=Decimal("520.00"),
                    offer_price_per_unit=Decimal("480.00"),
                    stock_quantity=Decimal("200"),
                    measurement_title="Pack size",
                    measurement_values=["1L", "3.5L", "5L"],
                ),
                ProductModel(
                    name="Brake Fluid DOT 4",
                    price_per_unit=Decimal("310.00"),
                    stock_quantity=Decimal("80"),
                    variant_title="Bottle",
                    variant_values=[{"label": "Metal", "image": None}, {"label": "Plastic", "image": None}],
                ),
                ProductModel(
                    name="Multipurpose Grease",
                    price_per_unit=Decimal("150.00"),
                    stock_quantity=Decimal("50"),
                ),
                CouponModel(code="SAVE10", discount_type="percentage", discount_value=Decimal("10")),
                CouponModel(
                    code="FLAT200",
                    discount_type="fixed",
                    discount_value=Decimal("200"),
                    min_order_amount=Decimal("1000"),
                    valid_until=datetime.now(timezone.utc) + timedelta(days=30),
                ),
            ]
        )
        db.commit()
        logger.info("Seeded demo users, products and coupons")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
