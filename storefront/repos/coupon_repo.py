# storefront/repos/coupon_repo.py
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from storefront.data.models.coupon import CouponModel


class CouponRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_active_by_code(self, code: str) -> CouponModel | None:
        return self.db.execute(
            select(CouponModel).where(
                func.upper(CouponModel.code) == code.strip().upper(),
                CouponModel.is_active.is_(True),
            )
        ).scalar_one_or_none()
