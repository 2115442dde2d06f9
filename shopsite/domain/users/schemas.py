"""User administration schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, field_validator

from ...models import PERMISSIONS, ROLES


class ProfileResponse(BaseModel):
    user_id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    is_approved: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    email: Optional[EmailStr] = None
    avatar_url: Optional[str] = None


class CurrentUserResponse(ProfileResponse):
    roles: list[str]
    permissions: list[str]
    can_access_dashboard: bool


class AdminUserResponse(ProfileResponse):
    role: str
    roles: list[str]
    permissions: list[str]


class RoleUpdate(BaseModel):
    role: str

    @field_validator("role")
    @classmethod
    def validate_role(cls, v):
        if v not in ROLES:
            raise ValueError(f"Role must be one of: {', '.join(ROLES)}")
        return v


class PermissionGrant(BaseModel):
    permission: str

    @field_validator("permission")
    @classmethod
    def validate_permission(cls, v):
        if v not in PERMISSIONS:
            raise ValueError(f"Permission must be one of: {', '.join(PERMISSIONS)}")
        return v


class SessionResponse(BaseModel):
    id: str
    user_id: str
    login_at: Optional[datetime] = None
    logout_at: Optional[datetime] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    is_active: bool

    class Config:
        from_attributes = True


class DeleteUserRequest(BaseModel):
    userId: Optional[str] = None
