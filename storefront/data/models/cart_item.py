from sqlalchemy import Column, Integer, ForeignKey, Numeric, String, JSON, UniqueConstraint
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class CartItemModel(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)

    #in the product's base measurement, may be fractional (litres)
    quantity = Column(Numeric(10, 3), nullable=False)

    variant_selection = Column(JSON, nullable=True)  # {"label": ..., "image": ...}
    measurement_label = Column(String, nullable=True)
    measurement_value = Column(String, nullable=True)

    product = relationship("ProductModel", lazy="joined")

    __table_args__ = (UniqueConstraint("user_id", "product_id", name="u_user_product"),)
