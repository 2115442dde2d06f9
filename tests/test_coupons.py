"""
Coupon tests: discount rounding, validity rules and dashboard management.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from shopsite.domain.coupons.service import CODE_ALPHABET, discounted_price, find_valid_coupon, generate_coupon_code
from shopsite.models import Coupon

from .conftest import auth_headers


def add_coupon(db, code="SAVE10", percent=10, active=True, expires_at=None):
    coupon = Coupon(name=f"{code} offer", code=code, discount_percent=percent, is_active=active, expires_at=expires_at)
    db.add(coupon)
    db.commit()
    return coupon


class TestDiscountedPrice:
    @pytest.mark.parametrize(
        "price,percent,expected",
        [
            (Decimal("999"), 10, 899),  # 899.1
            (Decimal("999"), 15, 849),  # 849.15
            (Decimal("299"), 50, 150),  # 149.5 rounds half up
            (Decimal("499"), 100, 0),
            (Decimal("599"), 1, 593),  # 593.01
        ],
    )
    def test_rounding(self, price, percent, expected):
        assert discounted_price(price, percent) == expected


class TestGenerateCode:
    def test_shape(self):
        code = generate_coupon_code()
        assert len(code) == 8
        assert set(code) <= set(CODE_ALPHABET)


class TestFindValidCoupon:
    def test_case_insensitive_lookup(self, db):
        add_coupon(db)
        assert find_valid_coupon(db, " save10 ").code == "SAVE10"

    def test_inactive_coupon_rejected(self, db):
        add_coupon(db, active=False)
        assert find_valid_coupon(db, "SAVE10") is None

    def test_expired_coupon_rejected(self, db):
        add_coupon(db, expires_at=datetime.now(timezone.utc) - timedelta(minutes=5))
        assert find_valid_coupon(db, "SAVE10") is None

    def test_future_expiry_accepted(self, db):
        add_coupon(db, expires_at=datetime.now(timezone.utc) + timedelta(days=3))
        assert find_valid_coupon(db, "SAVE10") is not None

    def test_blank_code(self, db):
        assert find_valid_coupon(db, "   ") is None


class TestCouponEndpoints:
    def test_validate_prices_a_service(self, client, db):
        add_coupon(db, code="FESTIVE15", percent=15)

        response = client.post("/coupons/validate", json={"code": "festive15", "price": "999"})

        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is True
        assert data["discount_percent"] == 15
        assert data["discounted_price"] == 849

    def test_validate_unknown_code(self, client):
        response = client.post("/coupons/validate", json={"code": "NOPE"})
        assert response.status_code == 404
        assert response.json()["detail"] == "Invalid or expired coupon code"

    def test_create_normalizes_code(self, client, staff):
        response = client.post(
            "/coupons",
            json={"name": "Diwali", "code": " diwali20 ", "discount_percent": 20},
            headers=auth_headers(staff.user_id),
        )
        assert response.status_code == 201
        assert response.json()["code"] == "DIWALI20"

    def test_duplicate_code_conflict(self, client, db, staff):
        add_coupon(db, code="DIWALI20")
        response = client.post(
            "/coupons",
            json={"name": "Again", "code": "diwali20", "discount_percent": 20},
            headers=auth_headers(staff.user_id),
        )
        assert response.status_code == 409

    @pytest.mark.parametrize("percent", [0, 101])
    def test_discount_out_of_range(self, client, staff, percent):
        response = client.post(
            "/coupons",
            json={"name": "Bad", "code": "BAD", "discount_percent": percent},
            headers=auth_headers(staff.user_id),
        )
        assert response.status_code == 422

    def test_toggle_disables_coupon(self, client, db, staff):
        coupon = add_coupon(db)
        response = client.post(f"/coupons/{coupon.id}/toggle", headers=auth_headers(staff.user_id))

        assert response.status_code == 200
        assert response.json()["is_active"] is False
        assert client.post("/coupons/validate", json={"code": "SAVE10"}).status_code == 404

    def test_management_requires_dashboard_access(self, client):
        assert client.get("/coupons").status_code == 401
        assert client.get("/coupons/generate-code").status_code == 401
