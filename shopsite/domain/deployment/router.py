"""Audit log router for super admins"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...audit import get_audit_logs
from ...database import get_db
from ...models import Profile
from ...policies import require_super_admin
from .schemas import AuditLogResponse

router = APIRouter(prefix="/admin/audit-logs", tags=["Audit"])


@router.get("", response_model=list[AuditLogResponse])
async def list_audit_logs(
    action: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    current_user: Profile = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    return get_audit_logs(db, action, limit)
