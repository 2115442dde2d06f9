"""
Shared pytest configuration and fixtures.
Environment is set before the application is imported, since config is read at import time.
"""

import os
import tempfile
import time
from datetime import timedelta
from unittest.mock import AsyncMock, patch

TEST_DIR = tempfile.mkdtemp(prefix="shopsite-tests-")
TEST_JWT_SECRET = "test-jwt-secret-with-enough-length-for-hs256"

os.environ.update(
    {
        "DATABASE_URL": f"sqlite:///{os.path.join(TEST_DIR, 'test.db')}",
        "SECRET_KEY": "test-secret-key",
        "SUPABASE_JWT_SECRET": TEST_JWT_SECRET,
        "SUPABASE_JWT_AUDIENCE": "authenticated",
        "RATE_LIMIT_ENABLED": "false",
        "REDIS_URL": "",
        "DB_LOG_SLOW_QUERIES": "false",
        "RESEND_API_KEY": "re_test_key",
        "ADMIN_EMAIL": "owner@example.com",
        "TWILIO_ACCOUNT_SID": "ACtest",
        "TWILIO_AUTH_TOKEN": "test_token",
        "TWILIO_PHONE_NUMBER": "+15551234567",
        "ADMIN_PHONE_NUMBER": "+919876543210",
        "BUSINESS_NAME": "Krishna Tech Solutions",
        "BUSINESS_PHONE": "+91 98765 43210",
    }
)
os.environ.pop("SUPABASE_URL", None)
os.environ.pop("SUPABASE_SERVICE_ROLE_KEY", None)
os.environ.pop("CREDENTIALS_ENCRYPTION_KEY", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from jose import jwt  # noqa: E402

from shopsite.database import Base, SessionLocal, engine  # noqa: E402
from shopsite.domain.appointments.service import business_today, is_bookable_date  # noqa: E402
from shopsite.main import app  # noqa: E402
from shopsite.models import Profile, UserRole  # noqa: E402


def make_token(
    user_id: str,
    email: str = None,
    full_name: str = None,
    expires_in: int = 3600,
    secret: str = TEST_JWT_SECRET,
    audience: str = "authenticated",
) -> str:
    """Build an access token shaped like the ones Supabase Auth issues"""
    claims = {
        "sub": user_id,
        "aud": audience,
        "exp": int(time.time()) + expires_in,
        "email": email or f"{user_id}@example.com",
        "user_metadata": {"full_name": full_name or user_id.title()},
    }
    return jwt.encode(claims, secret, algorithm="HS256")


def auth_headers(user_id: str, **kwargs) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id, **kwargs)}"}


def create_user(db, user_id: str, roles=("user",), approved: bool = False) -> Profile:
    profile = Profile(
        user_id=user_id,
        email=f"{user_id}@example.com",
        full_name=user_id.title(),
        is_approved=approved,
    )
    db.add(profile)
    for role in roles:
        db.add(UserRole(user_id=user_id, role=role))
    db.commit()
    db.refresh(profile)
    return profile


def next_bookable_date(skip: int = 0):
    """The first bookable day from tomorrow on, optionally skipping some bookable days"""
    day = business_today() + timedelta(days=1)
    while not is_bookable_date(day) or skip:
        if is_bookable_date(day):
            skip -= 1
        day += timedelta(days=1)
    return day


def next_sunday():
    day = business_today() + timedelta(days=1)
    while day.weekday() != 6:
        day += timedelta(days=1)
    return day


@pytest.fixture(autouse=True)
def database():
    """Fresh schema for every test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def notify_mock():
    """Booking notifications never leave the process in tests"""
    with patch(
        "shopsite.domain.appointments.router.notify_new_booking", new_callable=AsyncMock
    ) as mock_notify:
        mock_notify.return_value = {"email_sent": True, "sms_sent": True}
        yield mock_notify


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def staff(db):
    """Approved staff member with dashboard access"""
    return create_user(db, "staff-1", approved=True)


@pytest.fixture
def admin(db):
    return create_user(db, "admin-1", roles=("admin",), approved=True)


@pytest.fixture
def super_admin(db):
    return create_user(db, "root-1", roles=("super_admin",), approved=True)
