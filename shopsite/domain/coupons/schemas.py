"""Coupon schemas"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, field_validator


def _normalize_code(v: str) -> str:
    v = (v or "").strip().upper()
    if not v:
        raise ValueError("Coupon code is required")
    if len(v) > 50:
        raise ValueError("Coupon code is too long")
    return v


def _check_percent(v: int) -> int:
    if v < 1 or v > 100:
        raise ValueError("Discount must be between 1 and 100 percent")
    return v


class CouponCreate(BaseModel):
    name: str
    code: str
    discount_percent: int
    is_active: bool = True
    expires_at: Optional[datetime] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Coupon name is required")
        return v.strip()

    @field_validator("code")
    @classmethod
    def validate_code(cls, v):
        return _normalize_code(v)

    @field_validator("discount_percent")
    @classmethod
    def validate_percent(cls, v):
        return _check_percent(v)


class CouponUpdate(BaseModel):
    name: Optional[str] = None
    code: Optional[str] = None
    discount_percent: Optional[int] = None
    is_active: Optional[bool] = None
    expires_at: Optional[datetime] = None

    @field_validator("code")
    @classmethod
    def validate_code(cls, v):
        return _normalize_code(v) if v is not None else v

    @field_validator("discount_percent")
    @classmethod
    def validate_percent(cls, v):
        return _check_percent(v) if v is not None else v


class CouponResponse(BaseModel):
    id: str
    name: str
    code: str
    discount_percent: int
    is_active: bool
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CouponValidateRequest(BaseModel):
    code: str
    price: Optional[Decimal] = None


class CouponValidateResponse(BaseModel):
    valid: bool
    code: str
    name: str
    discount_percent: int
    original_price: Optional[Decimal] = None
    discounted_price: Optional[int] = None
