import logging
import os
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import changefeed  # noqa: F401 - registers the change feed flush listener
from . import models  # noqa: F401
from .config import FRONTEND_URL
from .database import Base, SessionLocal, engine
from .domain.appointments.router import router as appointments_router
from .domain.catalog.router import router as services_router
from .domain.chat.router import router as chat_router
from .domain.coupons.router import router as coupons_router
from .domain.deployment.router import router as audit_router
from .domain.settings.router import router as settings_router
from .domain.settings.service import seed_default_settings
from .domain.users.router import router as users_router
from .rate_limiter import get_redis_client
from .routes.auth import router as auth_router
from .routes.changes import router as changes_router
from .routes.functions import router as functions_router

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


def _create_tables() -> None:
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
    except Exception as e:
        # Another worker won the race to create them
        if "already exists" in str(e) or "duplicate key" in str(e):
            logger.info("🗄️ Tables were created concurrently by another worker")
            return
        logger.error(f"❌ Table creation failed: {e}")
        raise
    logger.info("🗄️ Tables ready")


def _check_redis() -> None:
    try:
        client = get_redis_client()
    except Exception as e:
        logger.warning(f"⚠️ Redis unreachable, rate limits stay per process: {e}")
        return
    if client is None:
        logger.info("ℹ️ No REDIS_URL, rate limits stay per process")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Starting Shopsite API")
    _create_tables()

    db = SessionLocal()
    try:
        seed_default_settings(db)
    finally:
        db.close()

    _check_redis()
    yield
    logger.info("👋 Shopsite API stopped")


app = FastAPI(title="Shopsite API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"⚠️ Rejected {request.method} {request.url.path}: {len(exc.errors())} invalid field(s)")
    return JSONResponse(status_code=422, content={"detail": jsonable_errors(exc)})


def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may carry the original exception object, which is not JSON serializable
    return [{k: v for k, v in error.items() if k != "ctx"} for error in exc.errors()]


@app.middleware("http")
async def log_requests(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception as e:
        logger.error(f"❌ Unhandled error on {request.method} {request.url.path}: {e}")
        raise


ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", f"{FRONTEND_URL},http://localhost:3000").split(",")
logger.info(f"🌐 CORS origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(appointments_router)
app.include_router(services_router)
app.include_router(coupons_router)
app.include_router(chat_router)
app.include_router(settings_router)
app.include_router(users_router)
app.include_router(audit_router)
app.include_router(changes_router)
app.include_router(functions_router)


@app.get("/")
def root():
    return {"message": "Shopsite API is running"}


@app.get("/health")
def health():
    return {"status": "healthy", "timestamp": time.time()}


@app.get("/health/redis")
async def redis_health_check():
    """Redis status for uptime checks; "disabled" when no REDIS_URL is configured"""
    try:
        client = get_redis_client()
        if client is None:
            return {"status": "disabled", "redis": {"connected": False}}

        started = time.perf_counter()
        client.ping()
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        version = client.info().get("redis_version", "unknown")
    except Exception as e:
        return {"status": "unhealthy", "redis": {"connected": False, "error": str(e)}}

    return {"status": "healthy", "redis": {"connected": True, "response_time_ms": elapsed_ms, "version": version}}
