"""User administration router"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...models import Profile
from ...policies import require_admin
from .schemas import (
    AdminUserResponse,
    PermissionGrant,
    ProfileResponse,
    RoleUpdate,
    SessionResponse,
)
from .service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/users", tags=["User Administration"])


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)


@router.get("", response_model=list[AdminUserResponse])
async def list_users(
    current_user: Profile = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    """Profiles merged with their roles and permissions, newest first"""
    return service.list_users()


@router.get("/sessions", response_model=list[SessionResponse])
async def list_sessions(
    user_id: Optional[str] = Query(None),
    current_user: Profile = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    return service.get_sessions(user_id)


@router.post("/{user_id}/approve", response_model=ProfileResponse)
async def approve_user(
    user_id: str,
    current_user: Profile = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    return service.set_approval(user_id, True, current_user)


@router.post("/{user_id}/reject", response_model=ProfileResponse)
async def reject_user(
    user_id: str,
    current_user: Profile = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    return service.set_approval(user_id, False, current_user)


@router.put("/{user_id}/role")
async def set_user_role(
    user_id: str,
    data: RoleUpdate,
    current_user: Profile = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    return service.set_role(user_id, data.role, current_user)


@router.post("/{user_id}/permissions")
async def grant_permission(
    user_id: str,
    data: PermissionGrant,
    current_user: Profile = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    return service.grant_permission(user_id, data.permission, current_user)


@router.delete("/{user_id}/permissions/{permission}")
async def revoke_permission(
    user_id: str,
    permission: str,
    current_user: Profile = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    return service.revoke_permission(user_id, permission)
