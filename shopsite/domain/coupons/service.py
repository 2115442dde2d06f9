"""Coupon service - management, validation and discount maths"""

import logging
import secrets
import string
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...database import is_unique_violation
from ...models import Coupon
from .repository import CouponRepository
from .schemas import CouponCreate, CouponUpdate

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 8


def generate_coupon_code(length: int = CODE_LENGTH) -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def discounted_price(price: Decimal, discount_percent: int) -> int:
    """price * (1 - percent/100), rounded to the nearest whole unit with halves going up"""
    value = Decimal(price) * (Decimal(100) - Decimal(discount_percent)) / Decimal(100)
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def find_valid_coupon(db: Session, code: str) -> Optional[Coupon]:
    """Look up a coupon by code (case-insensitive); None when missing, inactive or expired"""
    if not code or not code.strip():
        return None
    return CouponRepository.get_valid_coupon(db, code.strip().upper(), datetime.now(timezone.utc))


class CouponService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = CouponRepository()

    def get_coupons(self) -> list[Coupon]:
        return self.repo.get_coupons(self.db)

    def get_coupon(self, coupon_id: str) -> Coupon:
        coupon = self.repo.get_coupon_by_id(self.db, coupon_id)
        if not coupon:
            raise HTTPException(status_code=404, detail="Coupon not found")
        return coupon

    def _save(self, action, *args, **fields) -> Coupon:
        try:
            return action(self.db, *args, **fields)
        except IntegrityError as e:
            self.db.rollback()
            if is_unique_violation(e):
                raise HTTPException(status_code=409, detail="Coupon code already exists") from e
            raise

    def create_coupon(self, data: CouponCreate) -> Coupon:
        coupon = self._save(
            self.repo.create_coupon,
            name=data.name,
            code=data.code,
            discount_percent=data.discount_percent,
            is_active=data.is_active,
            expires_at=_as_utc(data.expires_at),
        )
        logger.info(f"🎟️ Coupon created: {coupon.code} ({coupon.discount_percent}%)")
        return coupon

    def update_coupon(self, coupon_id: str, data: CouponUpdate) -> Coupon:
        coupon = self.get_coupon(coupon_id)
        updates = data.model_dump(exclude_unset=True)
        if "expires_at" in updates:
            updates["expires_at"] = _as_utc(updates["expires_at"])
        for required in ("name", "code", "discount_percent", "is_active"):
            if required in updates and updates[required] is None:
                del updates[required]
        return self._save(self.repo.update_coupon, coupon, **updates)

    def toggle_coupon(self, coupon_id: str) -> Coupon:
        coupon = self.get_coupon(coupon_id)
        return self.repo.update_coupon(self.db, coupon, is_active=not coupon.is_active)

    def delete_coupon(self, coupon_id: str) -> dict:
        coupon = self.get_coupon(coupon_id)
        self.repo.delete_coupon(self.db, coupon)
        return {"message": "Coupon deleted"}

    def validate_coupon(self, code: str, price: Optional[Decimal] = None) -> dict:
        coupon = find_valid_coupon(self.db, code)
        if not coupon:
            raise HTTPException(status_code=404, detail="Invalid or expired coupon code")

        result = {
            "valid": True,
            "code": coupon.code,
            "name": coupon.name,
            "discount_percent": coupon.discount_percent,
            "original_price": price,
            "discounted_price": None,
        }
        if price is not None:
            result["discounted_price"] = discounted_price(price, coupon.discount_percent)
        return result
