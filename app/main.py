# app/main.py
from contextlib import asynccontextmanager
import logging
import time

from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.core.config import get_settings
from app.core.errors import AppError, InternalError, Unauthorized
from app.database import create_db_and_tables

# Import models so SQLModel metadata is populated before create_all()
from app.models import profile as _profile_models  # noqa: F401
from app.models import match as _match_models  # noqa: F401

# Routers
from app.routers.matches import router as matches_router
from app.routers.profiles import router as profiles_router

settings = get_settings()

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Verify DB connectivity and create tables.

    Shutdown:
      - No special cleanup needed for sync engine.
    """
    logger.info("🔄 Startup: Connecting to Supabase Postgres...")
    try:
        create_db_and_tables()
        logger.info("✅ Startup: DB connection OK, tables verified.")
    except Exception as e:
        logger.error(f"❌ Startup: DB connection FAILED: {e}")
        raise
    yield


app = FastAPI(
    title=settings.PROJECT_NAME or "SoulMate Matchmaking API",
    version="0.1.0",
    lifespan=lifespan,
)


# --- CORS configuration ---
# The web client and edge callers hit this API from arbitrary origins;
# preflight is answered for any origin unless CORS_ORIGINS narrows it.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials="*" not in settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration_ms = round((time.time() - start) * 1000, 2)
    if response.status_code >= 500:
        log = logger.error
    elif response.status_code >= 400:
        log = logger.warning
    else:
        log = logger.info
    log(
        "HTTP %s %s -> %s in %sms",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Render every AppError as {"error": ..., "details"?: ...}."""
    body = {"error": exc.message}
    if exc.details:
        body["details"] = exc.details
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
    return JSONResponse(status_code=exc.status_code, content=body, headers=headers)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    """
    Last resort for faults no service converted.

    Starlette runs this outside CORSMiddleware, so the allow-all origin
    header is added here by hand.
    """
    logger.exception(
        "Unhandled request error: method=%s path=%s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    error = InternalError()
    headers = {"Access-Control-Allow-Origin": "*"} if "*" in settings.CORS_ORIGINS else None
    return JSONResponse(
        status_code=error.status_code,
        content={"error": error.message},
        headers=headers,
    )


# Versioned API prefix, e.g. /api/v1
app.include_router(matches_router, prefix=settings.API_V1_STR)
app.include_router(profiles_router, prefix=settings.API_V1_STR)


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "soulmate-backend"}
