"""Service catalog schemas"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, field_validator


class ServiceCreate(BaseModel):
    name: str
    description: Optional[str] = None
    price: Decimal = Decimal("0")
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Service name is required")
        return v.strip()

    @field_validator("price")
    @classmethod
    def validate_price(cls, v):
        if v < 0:
            raise ValueError("Price cannot be negative")
        return v


class ServiceUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = None
    display_order: Optional[int] = None
    is_active: Optional[bool] = None

    @field_validator("price")
    @classmethod
    def validate_price(cls, v):
        if v is not None and v < 0:
            raise ValueError("Price cannot be negative")
        return v


class ServiceResponse(BaseModel):
    id: str
    name: str
    description: Optional[str]
    price: Decimal
    display_order: int
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
