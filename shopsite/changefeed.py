"""
Change feed for dashboard and site clients.

Every ORM insert, update or delete on a watched table appends a ChangeEvent row in the
same transaction. Clients poll with the last id they saw.

The listener is registered on import; main imports this module.
"""

import logging
from typing import Iterable, Optional

from sqlalchemy import event, inspect
from sqlalchemy.orm import Session

from .models import ChangeEvent

logger = logging.getLogger(__name__)

PUBLIC_TABLES = frozenset({"services", "site_settings"})
WATCHED_TABLES = PUBLIC_TABLES | frozenset({"appointments", "coupons", "profiles", "user_roles"})

MAX_BATCH = 500


def _collect(session: Session) -> list[dict]:
    events = []
    for operation, objects in (
        ("insert", session.new),
        ("update", session.dirty),
        ("delete", session.deleted),
    ):
        for obj in objects:
            table = getattr(obj, "__tablename__", None)
            if table not in WATCHED_TABLES:
                continue
            if operation == "update" and not session.is_modified(obj, include_collections=False):
                continue
            # Deleted rows may be expired; the identity key still carries the primary key
            state = inspect(obj)
            row_id = state.identity[0] if state.identity else obj.id
            events.append({"table_name": table, "row_id": str(row_id), "operation": operation})
    return events


@event.listens_for(Session, "after_flush")
def record_changes(session: Session, _flush_context):
    events = _collect(session)
    if events:
        session.connection().execute(ChangeEvent.__table__.insert(), events)
        logger.debug(f"📡 Recorded {len(events)} change event(s)")


def fetch_changes(
    db: Session, after: int, tables: Iterable[str], limit: int = 100
) -> tuple[list[ChangeEvent], int]:
    """
    Return events with id > after for the given tables, oldest first,
    plus the cursor to send on the next poll.

    Ids are handed out at flush time, so an event from a transaction that commits after a
    higher id was already polled is not returned. Writers to watched tables keep the gap
    between flush and commit short.
    """
    limit = max(1, min(limit, MAX_BATCH))
    events = (
        db.query(ChangeEvent)
        .filter(ChangeEvent.id > after, ChangeEvent.table_name.in_(list(tables)))
        .order_by(ChangeEvent.id.asc())
        .limit(limit)
        .all()
    )
    cursor = events[-1].id if events else after
    return events, cursor


def latest_cursor(db: Session) -> int:
    """Id of the newest event; a fresh client starts polling from here"""
    latest: Optional[ChangeEvent] = db.query(ChangeEvent).order_by(ChangeEvent.id.desc()).first()
    return latest.id if latest else 0
