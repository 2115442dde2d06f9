"""Site settings repository - key/value rows"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import SiteSetting


class SettingsRepository:
    @staticmethod
    def get_all(db: Session) -> list[SiteSetting]:
        return db.query(SiteSetting).order_by(SiteSetting.key.asc()).all()

    @staticmethod
    def get(db: Session, key: str) -> Optional[SiteSetting]:
        return db.query(SiteSetting).filter(SiteSetting.key == key).first()

    @staticmethod
    def upsert(db: Session, key: str, value: Optional[str]) -> SiteSetting:
        setting = db.query(SiteSetting).filter(SiteSetting.key == key).first()
        if setting:
            setting.value = value
        else:
            setting = SiteSetting(key=key, value=value)
            db.add(setting)
        db.commit()
        db.refresh(setting)
        return setting
