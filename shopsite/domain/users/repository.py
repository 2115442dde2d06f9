"""User administration repository - profiles, roles, permissions and login sessions"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import LoginSession, Profile, UserPermission, UserRole


class UserRepository:
    @staticmethod
    def get_profiles(db: Session) -> list[Profile]:
        return db.query(Profile).order_by(Profile.created_at.desc()).all()

    @staticmethod
    def get_profile(db: Session, user_id: str) -> Optional[Profile]:
        return db.query(Profile).filter(Profile.user_id == user_id).first()

    @staticmethod
    def get_roles_by_user(db: Session) -> dict[str, list[str]]:
        roles: dict[str, list[str]] = {}
        for user_id, role in db.query(UserRole.user_id, UserRole.role).all():
            roles.setdefault(user_id, []).append(role)
        return roles

    @staticmethod
    def get_permissions_by_user(db: Session) -> dict[str, list[str]]:
        permissions: dict[str, list[str]] = {}
        for user_id, permission in db.query(UserPermission.user_id, UserPermission.permission).all():
            permissions.setdefault(user_id, []).append(permission)
        return permissions

    @staticmethod
    def get_permissions(db: Session, user_id: str) -> list[str]:
        rows = db.query(UserPermission.permission).filter(UserPermission.user_id == user_id).all()
        return [row[0] for row in rows]

    @staticmethod
    def update_profile(db: Session, profile: Profile, **updates) -> Profile:
        for key, value in updates.items():
            if hasattr(profile, key):
                setattr(profile, key, value)
        db.commit()
        db.refresh(profile)
        return profile

    @staticmethod
    def replace_role(db: Session, user_id: str, role: str) -> None:
        for existing in db.query(UserRole).filter(UserRole.user_id == user_id).all():
            db.delete(existing)
        db.flush()
        db.add(UserRole(user_id=user_id, role=role))
        db.commit()

    @staticmethod
    def get_permission(db: Session, user_id: str, permission: str) -> Optional[UserPermission]:
        return (
            db.query(UserPermission)
            .filter(UserPermission.user_id == user_id, UserPermission.permission == permission)
            .first()
        )

    @staticmethod
    def add_permission(db: Session, user_id: str, permission: str, granted_by: str) -> UserPermission:
        grant = UserPermission(user_id=user_id, permission=permission, granted_by=granted_by)
        db.add(grant)
        db.commit()
        db.refresh(grant)
        return grant

    @staticmethod
    def remove_permission(db: Session, grant: UserPermission) -> None:
        db.delete(grant)
        db.commit()

    @staticmethod
    def stage_user_removal(db: Session, user_id: str) -> None:
        """
        Delete every row belonging to a user without committing.
        Profile and role deletes are left pending; they flush, and record their change events, on commit.
        """
        db.query(LoginSession).filter(LoginSession.user_id == user_id).delete(synchronize_session=False)
        db.query(UserPermission).filter(UserPermission.user_id == user_id).delete(
            synchronize_session=False
        )
        for role in db.query(UserRole).filter(UserRole.user_id == user_id).all():
            db.delete(role)
        profile = db.query(Profile).filter(Profile.user_id == user_id).first()
        if profile:
            db.delete(profile)

    # Login sessions

    @staticmethod
    def create_session(db: Session, user_id: str, ip_address: str, user_agent: Optional[str]) -> LoginSession:
        session = LoginSession(user_id=user_id, ip_address=ip_address, user_agent=user_agent, is_active=True)
        db.add(session)
        db.commit()
        db.refresh(session)
        return session

    @staticmethod
    def close_active_sessions(db: Session, user_id: str, logout_at: datetime) -> int:
        count = (
            db.query(LoginSession)
            .filter(LoginSession.user_id == user_id, LoginSession.is_active.is_(True))
            .update({"is_active": False, "logout_at": logout_at}, synchronize_session=False)
        )
        db.commit()
        return count

    @staticmethod
    def get_sessions(db: Session, user_id: Optional[str] = None, limit: int = 100) -> list[LoginSession]:
        query = db.query(LoginSession)
        if user_id:
            query = query.filter(LoginSession.user_id == user_id)
        return query.order_by(LoginSession.login_at.desc()).limit(limit).all()
