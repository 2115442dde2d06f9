"""Coupon router"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...database import get_db
from ...models import Profile
from ...policies import require_dashboard_access
from .schemas import (
    CouponCreate,
    CouponResponse,
    CouponUpdate,
    CouponValidateRequest,
    CouponValidateResponse,
)
from .service import CouponService, generate_coupon_code

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/coupons", tags=["Coupons"])


def get_coupon_service(db: Session = Depends(get_db)) -> CouponService:
    return CouponService(db)


@router.post("/validate", response_model=CouponValidateResponse)
async def validate_coupon(
    data: CouponValidateRequest,
    service: CouponService = Depends(get_coupon_service),
):
    """Public: check a code and optionally price a service with it"""
    return service.validate_coupon(data.code, data.price)


@router.get("", response_model=list[CouponResponse])
async def list_coupons(
    current_user: Profile = Depends(require_dashboard_access),
    service: CouponService = Depends(get_coupon_service),
):
    return service.get_coupons()


@router.get("/generate-code")
async def generate_code(current_user: Profile = Depends(require_dashboard_access)):
    return {"code": generate_coupon_code()}


@router.post("", response_model=CouponResponse, status_code=201)
async def create_coupon(
    data: CouponCreate,
    current_user: Profile = Depends(require_dashboard_access),
    service: CouponService = Depends(get_coupon_service),
):
    return service.create_coupon(data)


@router.patch("/{coupon_id}", response_model=CouponResponse)
async def update_coupon(
    coupon_id: str,
    data: CouponUpdate,
    current_user: Profile = Depends(require_dashboard_access),
    service: CouponService = Depends(get_coupon_service),
):
    return service.update_coupon(coupon_id, data)


@router.post("/{coupon_id}/toggle", response_model=CouponResponse)
async def toggle_coupon(
    coupon_id: str,
    current_user: Profile = Depends(require_dashboard_access),
    service: CouponService = Depends(get_coupon_service),
):
    return service.toggle_coupon(coupon_id)


@router.delete("/{coupon_id}")
async def delete_coupon(
    coupon_id: str,
    current_user: Profile = Depends(require_dashboard_access),
    service: CouponService = Depends(get_coupon_service),
):
    return service.delete_coupon(coupon_id)
