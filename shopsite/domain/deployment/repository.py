"""Client deployment credentials repository - a single-row table"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import ClientSupabaseCredentials


class CredentialsRepository:
    @staticmethod
    def get(db: Session) -> Optional[ClientSupabaseCredentials]:
        return db.query(ClientSupabaseCredentials).order_by(ClientSupabaseCredentials.created_at.desc()).first()

    @staticmethod
    def replace(db: Session, **data) -> ClientSupabaseCredentials:
        """Only one client project is managed at a time"""
        db.query(ClientSupabaseCredentials).delete(synchronize_session=False)
        credentials = ClientSupabaseCredentials(**data)
        db.add(credentials)
        db.commit()
        db.refresh(credentials)
        return credentials

    @staticmethod
    def update(db: Session, credentials: ClientSupabaseCredentials, **updates) -> ClientSupabaseCredentials:
        for key, value in updates.items():
            setattr(credentials, key, value)
        db.commit()
        db.refresh(credentials)
        return credentials

    @staticmethod
    def delete_all(db: Session) -> int:
        count = db.query(ClientSupabaseCredentials).delete(synchronize_session=False)
        db.commit()
        return count
