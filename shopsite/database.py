import logging
import os
import time

from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import DATABASE_URL

logger = logging.getLogger(__name__)

POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "10"))
MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "20"))
POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", "30"))
POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "300"))
LOG_SLOW_QUERIES = os.getenv("DB_LOG_SLOW_QUERIES", "true").lower() == "true"
SLOW_QUERY_SECONDS = float(os.getenv("DB_SLOW_QUERY_THRESHOLD", "1.0"))

IS_SQLITE = DATABASE_URL.startswith("sqlite")


def _build_engine():
    if IS_SQLITE:
        # Local runs and tests; no pool tuning
        return create_engine(DATABASE_URL, connect_args={"check_same_thread": False, "timeout": 15})

    logger.info(f"📊 Postgres pool: size={POOL_SIZE} overflow={MAX_OVERFLOW} timeout={POOL_TIMEOUT}s")
    return create_engine(
        DATABASE_URL,
        pool_pre_ping=True,
        pool_recycle=POOL_RECYCLE,
        pool_size=POOL_SIZE,
        max_overflow=MAX_OVERFLOW,
        pool_timeout=POOL_TIMEOUT,
    )


def _watch_slow_queries(target, threshold: float) -> None:
    """Warn about statements that take longer than `threshold` seconds"""

    @event.listens_for(target, "before_cursor_execute")
    def _start_timer(conn, _cursor, _statement, _parameters, _context, _executemany):
        conn.info.setdefault("statement_started", []).append(time.perf_counter())

    @event.listens_for(target, "after_cursor_execute")
    def _stop_timer(conn, _cursor, statement, _parameters, _context, _executemany):
        elapsed = time.perf_counter() - conn.info["statement_started"].pop()
        if elapsed > threshold:
            logger.warning(f"🐌 {elapsed:.2f}s statement: {statement[:200]}")


try:
    engine = _build_engine()
except Exception as e:
    logger.error(f"❌ Could not create the database engine: {e}")
    raise

if LOG_SLOW_QUERIES:
    _watch_slow_queries(engine, SLOW_QUERY_SECONDS)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def is_unique_violation(exc: Exception) -> bool:
    """True when a DB error is a unique-constraint violation (SQLSTATE 23505)"""
    orig = getattr(exc, "orig", None)
    if getattr(orig, "sqlstate", None) == "23505" or getattr(orig, "pgcode", None) == "23505":
        return True
    message = str(exc).lower()
    return "duplicate key" in message or "unique constraint" in message
