"""Site settings schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class SettingUpdate(BaseModel):
    value: Optional[str] = None


class SettingResponse(BaseModel):
    key: str
    value: Optional[str]
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
