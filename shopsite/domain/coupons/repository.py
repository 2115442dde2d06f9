"""Coupon repository"""

from datetime import datetime
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import Coupon


class CouponRepository:
    @staticmethod
    def get_coupons(db: Session) -> list[Coupon]:
        return db.query(Coupon).order_by(Coupon.created_at.desc()).all()

    @staticmethod
    def get_coupon_by_id(db: Session, coupon_id: str) -> Optional[Coupon]:
        return db.query(Coupon).filter(Coupon.id == coupon_id).first()

    @staticmethod
    def get_valid_coupon(db: Session, code: str, now: datetime) -> Optional[Coupon]:
        """Active and not past its expiry"""
        return (
            db.query(Coupon)
            .filter(
                Coupon.code == code,
                Coupon.is_active.is_(True),
                or_(Coupon.expires_at.is_(None), Coupon.expires_at > now),
            )
            .first()
        )

    @staticmethod
    def create_coupon(db: Session, **data) -> Coupon:
        coupon = Coupon(**data)
        db.add(coupon)
        db.commit()
        db.refresh(coupon)
        return coupon

    @staticmethod
    def update_coupon(db: Session, coupon: Coupon, **updates) -> Coupon:
        for key, value in updates.items():
            if hasattr(coupon, key):
                setattr(coupon, key, value)
        db.commit()
        db.refresh(coupon)
        return coupon

    @staticmethod
    def delete_coupon(db: Session, coupon: Coupon) -> None:
        db.delete(coupon)
        db.commit()
