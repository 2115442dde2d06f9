"""Polling change feed"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..auth import get_optional_user
from ..changefeed import PUBLIC_TABLES, WATCHED_TABLES, fetch_changes, latest_cursor
from ..database import get_db
from ..models import Profile
from ..policies import can_use_dashboard

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/changes", tags=["Changes"])


class ChangeEventResponse(BaseModel):
    id: int
    table_name: str
    row_id: str
    operation: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ChangesResponse(BaseModel):
    events: list[ChangeEventResponse]
    cursor: int


@router.get("", response_model=ChangesResponse)
async def poll_changes(
    after: Optional[int] = Query(None, ge=0, description="Last event id seen; omit to get the current cursor"),
    tables: Optional[str] = Query(None, description="Comma-separated table names"),
    limit: int = Query(100, ge=1, le=500),
    current_user: Optional[Profile] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    """
    Events after a cursor. Anonymous callers may watch services and site_settings;
    other tables need dashboard access.
    """
    allowed = WATCHED_TABLES if current_user and can_use_dashboard(db, current_user) else PUBLIC_TABLES

    if tables:
        requested = {t.strip() for t in tables.split(",") if t.strip()}
        unknown = requested - WATCHED_TABLES
        if unknown:
            raise HTTPException(status_code=400, detail=f"Unknown tables: {', '.join(sorted(unknown))}")
        if not requested <= allowed:
            raise HTTPException(
                status_code=403 if current_user else 401,
                detail="Not allowed to watch these tables",
            )
    else:
        requested = set(allowed)

    if after is None:
        return {"events": [], "cursor": latest_cursor(db)}

    events, cursor = fetch_changes(db, after, requested, limit)
    return {"events": events, "cursor": cursor}
