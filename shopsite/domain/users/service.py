"""User administration service"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...database import is_unique_violation
from ...models import LoginSession, Profile
from ...policies import can_use_dashboard, get_user_roles
from ...services.identity_admin import IdentityAdminError, delete_identity
from .repository import UserRepository
from .schemas import ProfileUpdate

logger = logging.getLogger(__name__)

ROLE_RANK = {"user": 0, "admin": 1, "super_admin": 2}


def primary_role(roles: list[str]) -> str:
    return max(roles, key=lambda r: ROLE_RANK.get(r, -1)) if roles else "user"


class UserService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepository()

    # ------------------------------------------------------------------
    # Own account
    # ------------------------------------------------------------------

    def get_me(self, profile: Profile) -> dict:
        roles = sorted(get_user_roles(self.db, profile.user_id))
        return {
            "user_id": profile.user_id,
            "email": profile.email,
            "full_name": profile.full_name,
            "avatar_url": profile.avatar_url,
            "is_approved": profile.is_approved,
            "created_at": profile.created_at,
            "roles": roles,
            "permissions": self.repo.get_permissions(self.db, profile.user_id),
            "can_access_dashboard": can_use_dashboard(self.db, profile),
        }

    def update_me(self, profile: Profile, data: ProfileUpdate) -> Profile:
        updates = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        if "full_name" in updates:
            updates["full_name"] = updates["full_name"].strip()
        return self.repo.update_profile(self.db, profile, **updates)

    def record_login(self, profile: Profile, ip_address: str, user_agent: Optional[str]) -> LoginSession:
        session = self.repo.create_session(self.db, profile.user_id, ip_address, user_agent)
        logger.info(f"🔑 Login recorded for {profile.user_id} from {ip_address}")
        return session

    def record_logout(self, profile: Profile) -> dict:
        closed = self.repo.close_active_sessions(self.db, profile.user_id, datetime.now(timezone.utc))
        logger.info(f"🔒 Closed {closed} active session(s) for {profile.user_id}")
        return {"closed_sessions": closed}

    def get_own_sessions(self, profile: Profile) -> list[LoginSession]:
        return self.repo.get_sessions(self.db, profile.user_id)

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def list_users(self) -> list[dict]:
        roles_by_user = self.repo.get_roles_by_user(self.db)
        permissions_by_user = self.repo.get_permissions_by_user(self.db)
        users = []
        for profile in self.repo.get_profiles(self.db):
            roles = sorted(roles_by_user.get(profile.user_id, []))
            users.append(
                {
                    "user_id": profile.user_id,
                    "email": profile.email,
                    "full_name": profile.full_name,
                    "avatar_url": profile.avatar_url,
                    "is_approved": profile.is_approved,
                    "created_at": profile.created_at,
                    "role": primary_role(roles),
                    "roles": roles,
                    "permissions": sorted(permissions_by_user.get(profile.user_id, [])),
                }
            )
        return users

    def get_profile(self, user_id: str) -> Profile:
        profile = self.repo.get_profile(self.db, user_id)
        if not profile:
            raise HTTPException(status_code=404, detail="User not found")
        return profile

    def set_approval(self, user_id: str, approved: bool, actor: Profile) -> Profile:
        profile = self.get_profile(user_id)
        profile = self.repo.update_profile(self.db, profile, is_approved=approved)
        logger.info(f"👤 User {user_id} {'approved' if approved else 'rejected'} by {actor.user_id}")
        return profile

    def set_role(self, user_id: str, role: str, actor: Profile) -> dict:
        self.get_profile(user_id)
        if user_id == actor.user_id:
            raise HTTPException(status_code=400, detail="Cannot change your own role")

        actor_roles = get_user_roles(self.db, actor.user_id)
        target_roles = get_user_roles(self.db, user_id)
        touches_super_admin = role == "super_admin" or "super_admin" in target_roles
        if touches_super_admin and "super_admin" not in actor_roles:
            raise HTTPException(status_code=403, detail="Super admin access required")

        self.repo.replace_role(self.db, user_id, role)
        logger.info(f"👤 Role of {user_id} set to {role} by {actor.user_id}")
        return {"user_id": user_id, "role": role}

    def grant_permission(self, user_id: str, permission: str, actor: Profile) -> dict:
        self.get_profile(user_id)
        if not self.repo.get_permission(self.db, user_id, permission):
            try:
                self.repo.add_permission(self.db, user_id, permission, actor.user_id)
            except IntegrityError as e:
                self.db.rollback()
                if not is_unique_violation(e):
                    raise
        return {"user_id": user_id, "permissions": self.repo.get_permissions(self.db, user_id)}

    def revoke_permission(self, user_id: str, permission: str) -> dict:
        grant = self.repo.get_permission(self.db, user_id, permission)
        if grant:
            self.repo.remove_permission(self.db, grant)
        return {"user_id": user_id, "permissions": self.repo.get_permissions(self.db, user_id)}

    def get_sessions(self, user_id: Optional[str] = None) -> list[LoginSession]:
        return self.repo.get_sessions(self.db, user_id)

    async def delete_user(self, actor: Profile, user_id: Optional[str]) -> dict:
        """
        Remove a user's rows and their identity at the auth provider.
        Rows are only committed once the identity is gone, so a failure leaves everything in place.
        """
        if not user_id:
            raise HTTPException(status_code=400, detail="User ID is required")
        if user_id == actor.user_id:
            raise HTTPException(status_code=400, detail="Cannot delete your own account")

        logger.info(f"🗑️ Deleting user {user_id} (requested by {actor.user_id})")
        try:
            self.repo.stage_user_removal(self.db, user_id)
            await delete_identity(user_id)
        except IdentityAdminError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to delete user {user_id} from auth: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete user from auth") from e
        except Exception:
            self.db.rollback()
            raise

        self.db.commit()
        logger.info(f"✅ User {user_id} deleted")
        return {"success": True, "message": "User deleted successfully"}
