"""Append-only audit trail for privileged actions"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from .models import AdminAuditLog

logger = logging.getLogger(__name__)


def record_audit(
    db: Session,
    user_id: str,
    action: str,
    details: Optional[dict] = None,
    ip_address: Optional[str] = None,
) -> None:
    """
    Write one audit row in its own commit, after the action's own write.
    A failure here is logged and never fails the action.
    """
    payload = dict(details or {})
    payload.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
    try:
        db.add(AdminAuditLog(user_id=user_id, action=action, details=payload, ip_address=ip_address))
        db.commit()
        logger.info(f"📝 Audit logged: {action} by {user_id}")
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Failed to log audit {action}: {e}")


def get_audit_logs(db: Session, action: Optional[str] = None, limit: int = 100) -> list[AdminAuditLog]:
    query = db.query(AdminAuditLog)
    if action:
        query = query.filter(AdminAuditLog.action == action)
    return query.order_by(AdminAuditLog.id.desc()).limit(max(1, min(limit, 500))).all()
