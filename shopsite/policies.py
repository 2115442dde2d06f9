"""
Authorization predicates and FastAPI dependencies.

Every protected operation declares the capability it needs:

- dashboard:   admin or super_admin role, or an approved profile
- admin:       admin or super_admin role
- super_admin: super_admin role
"""

import logging

from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from .auth import get_current_user
from .database import get_db
from .models import Profile, UserRole

logger = logging.getLogger(__name__)

ADMIN_ROLES = {"admin", "super_admin"}


def get_user_roles(db: Session, user_id: str) -> set[str]:
    rows = db.query(UserRole.role).filter(UserRole.user_id == user_id).all()
    return {row[0] for row in rows}


def has_role(db: Session, user_id: str, role: str) -> bool:
    return (
        db.query(UserRole.id).filter(UserRole.user_id == user_id, UserRole.role == role).first()
        is not None
    )


def is_admin(db: Session, user_id: str) -> bool:
    return bool(get_user_roles(db, user_id) & ADMIN_ROLES)


def can_use_dashboard(db: Session, profile: Profile) -> bool:
    return bool(profile.is_approved) or is_admin(db, profile.user_id)


async def require_dashboard_access(
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Profile:
    """Approved staff or administrators"""
    if not can_use_dashboard(db, user):
        logger.warning(f"⚠️ Unapproved user {user.user_id} attempted a dashboard operation")
        raise HTTPException(status_code=403, detail="Account pending approval")
    return user


async def require_admin(
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Profile:
    if not is_admin(db, user.user_id):
        logger.warning(f"⚠️ Non-admin {user.user_id} attempted an admin operation")
        raise HTTPException(status_code=403, detail="Unauthorized: Admin access required")
    return user


async def require_super_admin(
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Profile:
    if not has_role(db, user.user_id, "super_admin"):
        logger.warning(f"⚠️ Non-super-admin {user.user_id} attempted a super admin operation")
        raise HTTPException(status_code=403, detail="Super admin access required")
    return user
