#storefront/data/models/product.py
from sqlalchemy import Column, Integer, String, Boolean, Numeric, JSON

from storefront.data.database import Base


class ProductModel(Base):
    """Catalog product. Managed by the admin back office, read-only for checkout."""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)

    price_per_unit = Column(Numeric(10, 2), nullable=False)
    offer_price_per_unit = Column(Numeric(10, 2), nullable=True)
    stock_quantity = Column(Numeric(10, 3), nullable=False, default=0)

    # [{"label": "Red", "image": "https://..."}, ...]
    variant_title = Column(String, nullable=True)
    variant_values = Column(JSON, nullable=True)

    # ["1L", "5L", ...]
    measurement_title = Column(String, nullable=True)
    measurement_values = Column(JSON, nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)

    @property
    def variant_options(self) -> list:
        return [v for v in (self.variant_values or []) if isinstance(v, dict) and v.get("label")]

    @property
    def measurement_options(self) -> list:
        return [str(v) for v in (self.measurement_values or [])]
