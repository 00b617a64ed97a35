from sqlalchemy import Column, Integer, ForeignKey, Numeric, String, JSON
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class OrderItemModel(Base):
    """Snapshot of one cart line, frozen when the order is placed."""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    #no FK: the catalog may drop the product, the snapshot stays
    product_id = Column(Integer, nullable=False)
    product_name = Column(String, nullable=False)

    quantity = Column(Numeric(10, 3), nullable=False)
    price_per_unit = Column(Numeric(10, 2), nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)

    variant_selection = Column(JSON, nullable=True)
    measurement_label = Column(String, nullable=True)
    measurement_value = Column(String, nullable=True)

    order = relationship("OrderModel", back_populates="items")
