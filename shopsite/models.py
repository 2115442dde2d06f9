import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Time,
    UniqueConstraint,
    text,
)
from sqlalchemy.sql import func

from .database import Base

APPOINTMENT_STATUSES = ("pending", "confirmed", "cancelled", "completed")
ROLES = ("user", "admin", "super_admin")
PERMISSIONS = ("read", "write", "change_password", "manage_appointments", "manage_services")
CONNECTION_STATUSES = ("not_tested", "connected", "failed")


def generate_uuid():
    return str(uuid.uuid4())


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_name = Column(String(255), nullable=False)
    user_email = Column(String(255), nullable=False)
    user_phone = Column(String(50), nullable=True)
    service_type = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    appointment_date = Column(Date, nullable=False, index=True)
    appointment_time = Column(Time, nullable=False)
    status = Column(String(20), nullable=False, default="pending")  # pending, confirmed, cancelled, completed
    cancelled_by = Column(String(36), nullable=True)  # user_id of the staff member
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # At most one live booking per slot; cancelled rows free the slot again
    __table_args__ = (
        Index(
            "uq_appointments_active_slot",
            "appointment_date",
            "appointment_time",
            unique=True,
            postgresql_where=text("status <> 'cancelled'"),
            sqlite_where=text("status <> 'cancelled'"),
        ),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled', 'completed')",
            name="ck_appointments_status",
        ),
    )

    @property
    def booking_id(self) -> str:
        """Short public reference shown to customers"""
        return self.id.split("-")[0].upper()


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), unique=True, index=True, nullable=False)  # identity provider subject
    email = Column(String(255), nullable=True)
    full_name = Column(String(255), nullable=True)
    avatar_url = Column(String(500), nullable=True)
    is_approved = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class UserRole(Base):
    __tablename__ = "user_roles"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), index=True, nullable=False)
    role = Column(String(20), nullable=False, default="user")  # user, admin, super_admin
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),)


class UserPermission(Base):
    __tablename__ = "user_permissions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), index=True, nullable=False)
    permission = Column(String(50), nullable=False)
    granted_by = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "permission", name="uq_user_permissions_user_permission"),
    )


class Service(Base):
    __tablename__ = "services"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    display_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Coupon(Base):
    __tablename__ = "coupons"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    code = Column(String(50), unique=True, index=True, nullable=False)  # stored upper-case
    discount_percent = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(
            "discount_percent >= 1 AND discount_percent <= 100", name="ck_coupons_discount_range"
        ),
    )


class LoginSession(Base):
    __tablename__ = "sessions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), index=True, nullable=False)
    login_at = Column(DateTime(timezone=True), server_default=func.now())
    logout_at = Column(DateTime(timezone=True), nullable=True)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(500), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)


class SiteSetting(Base):
    __tablename__ = "site_settings"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    key = Column(String(100), unique=True, index=True, nullable=False)
    value = Column(Text, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class ClientSupabaseCredentials(Base):
    __tablename__ = "client_supabase_credentials"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    supabase_url = Column(String(500), nullable=False)
    supabase_anon_key = Column(Text, nullable=False)
    supabase_service_role_key_encrypted = Column(Text, nullable=False)  # Fernet token
    connection_status = Column(String(20), nullable=False, default="not_tested")
    db_initialized = Column(Boolean, nullable=False, default=False)
    last_connection_test = Column(DateTime(timezone=True), nullable=True)
    last_initialized_at = Column(DateTime(timezone=True), nullable=True)
    created_by = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class AdminAuditLog(Base):
    __tablename__ = "admin_audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), index=True, nullable=True)
    action = Column(String(100), nullable=False)
    details = Column(JSON, nullable=True)
    ip_address = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class ChangeEvent(Base):
    """Row-level change notification consumed by dashboard and site clients"""

    __tablename__ = "change_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    table_name = Column(String(100), index=True, nullable=False)
    row_id = Column(String(36), nullable=False)
    operation = Column(String(10), nullable=False)  # insert, update, delete
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = ({"sqlite_autoincrement": True},)
