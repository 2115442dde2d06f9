"""Site settings service"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import SiteSetting
from .repository import SettingsRepository

logger = logging.getLogger(__name__)

MAINTENANCE_MODE = "maintenance_mode"

DEFAULT_SETTINGS = {MAINTENANCE_MODE: "false"}


def seed_default_settings(db: Session) -> None:
    """Insert any missing default settings; existing values are left alone"""
    missing = [key for key in DEFAULT_SETTINGS if SettingsRepository.get(db, key) is None]
    for key in missing:
        db.add(SiteSetting(key=key, value=DEFAULT_SETTINGS[key]))
    if missing:
        db.commit()
        logger.info(f"✅ Seeded default settings: {missing}")


def is_maintenance_mode(db: Session) -> bool:
    setting = SettingsRepository.get(db, MAINTENANCE_MODE)
    return bool(setting and (setting.value or "").strip().lower() == "true")


class SettingsService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = SettingsRepository()

    def list_settings(self) -> list[SiteSetting]:
        return self.repo.get_all(self.db)

    def get_setting(self, key: str) -> SiteSetting:
        setting = self.repo.get(self.db, key)
        if not setting:
            raise HTTPException(status_code=404, detail="Setting not found")
        return setting

    def update_setting(self, key: str, value: Optional[str], updated_by: str) -> SiteSetting:
        if not key or len(key) > 100:
            raise HTTPException(status_code=400, detail="Invalid setting key")
        setting = self.repo.upsert(self.db, key, value)
        logger.info(f"⚙️ Setting {key} updated by {updated_by}")
        return setting
