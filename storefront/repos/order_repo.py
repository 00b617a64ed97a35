# storefront/repos/order_repo.py
from datetime import datetime
from typing import List

from sqlalchemy import select, update
from sqlalchemy.orm import Session, selectinload

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel) -> OrderModel:
        # flush only, the caller owns the transaction
        self.db.add(order)
        self.db.flush()
        return order

    def add_order_items(self, items: List[OrderItemModel]) -> None:
        self.db.add_all(items)
        self.db.flush()

    def order_number_exists(self, order_number: str) -> bool:
        return self.db.execute(
            select(OrderModel.id).where(OrderModel.order_number == order_number)
        ).first() is not None

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(OrderModel.id == order_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def list_orders(self, user_id: int) -> List[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .options(selectinload(OrderModel.items))
                .where(OrderModel.user_id == user_id)
                .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            ).scalars()
        )

    def update_payment_status(
        self, order_id: int, old_status: str, new_data: dict, order_status: str = "pending"
    ) -> int:
        # conditional update, 0 rows means someone else moved the order first
        result = self.db.execute(
            update(OrderModel)
            .where(
                OrderModel.id == order_id,
                OrderModel.payment_status == old_status,
                OrderModel.status == order_status,
            )
            .values(**new_data)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def mark_stale_pending_abandoned(self, cutoff: datetime) -> List[int]:
        stale = list(
            self.db.execute(
                select(OrderModel.id).where(
                    OrderModel.status == "pending",
                    OrderModel.payment_status == "pending",
                    OrderModel.created_at < cutoff,
                )
            ).scalars()
        )
        if stale:
            self.db.execute(
                update(OrderModel)
                .where(OrderModel.id.in_(stale))
                .values(status="abandoned")
                .execution_options(synchronize_session="fetch")
            )
        return stale

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
