"""Site settings router"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...database import get_db
from ...models import Profile
from ...policies import require_dashboard_access
from .schemas import SettingResponse, SettingUpdate
from .service import SettingsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["Settings"])


def get_settings_service(db: Session = Depends(get_db)) -> SettingsService:
    return SettingsService(db)


@router.get("", response_model=list[SettingResponse])
async def list_settings(service: SettingsService = Depends(get_settings_service)):
    """Public: the site reads these to decide e.g. whether booking is open"""
    return service.list_settings()


@router.get("/{key}", response_model=SettingResponse)
async def get_setting(key: str, service: SettingsService = Depends(get_settings_service)):
    return service.get_setting(key)


@router.put("/{key}", response_model=SettingResponse)
async def update_setting(
    key: str,
    data: SettingUpdate,
    current_user: Profile = Depends(require_dashboard_access),
    service: SettingsService = Depends(get_settings_service),
):
    return service.update_setting(key, data.value, current_user.user_id)
