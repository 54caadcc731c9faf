"""
StoreKeep API - Main Application
FastAPI application with CORS, error handling, request logging and the
optional rental expiry loop
"""
import asyncio
import logging
import traceback
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from storekeep.api.routes import (
    auth_router,
    buildings_router,
    units_router,
    customers_router,
    rentals_router,
    payments_router,
    dashboard_router,
)
from storekeep.core.config import settings
from storekeep.core.exceptions import InconsistencyError, LedgerError
from storekeep.database import close_db_connection, init_db, test_connection
from storekeep.dependencies import storage_session
from storekeep.services.expiry_scheduler import start_expiry_scheduler


# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# ==================== STARTUP & SHUTDOWN ====================


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("=" * 70)
    logger.info(f"Starting {settings.PROJECT_NAME} v{settings.VERSION}")
    logger.info("=" * 70)
    logger.info(f"Storage backend: {'supabase' if settings.supabase_enabled else 'sql'}")

    if not settings.supabase_enabled:
        if not test_connection():
            logger.warning("[WARN] Database connection failed - continuing in degraded mode")
        if not init_db():
            logger.warning("[WARN] Database init returned False - tables may not exist")

    expiry_task = None
    if settings.EXPIRY_CHECK_ENABLED:
        expiry_task = start_expiry_scheduler(storage_session, settings.EXPIRY_CHECK_INTERVAL_SECONDS)

    logger.info("[OK] Application startup complete!")
    yield

    logger.info("Shutting down application...")
    if expiry_task:
        expiry_task.cancel()
        try:
            await expiry_task
        except asyncio.CancelledError:
            pass
    close_db_connection()
    logger.info("Application shutdown complete")


# Initialize FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description=settings.PROJECT_DESCRIPTION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)


# ==================== MIDDLEWARE ====================


# Compression: GZip responses
app.add_middleware(GZipMiddleware, minimum_size=1000)

# CORS: the dashboard frontend runs on a different origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["*"],
    max_age=3600,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming requests"""
    # Skip logging for health checks
    if request.url.path in ["/health", "/status"]:
        return await call_next(request)

    start_time = datetime.now(timezone.utc)
    logger.info(f">> {request.method} {request.url.path}")

    try:
        response = await call_next(request)
        duration = (datetime.now(timezone.utc) - start_time).total_seconds()
        logger.info(f"<< {request.method} {request.url.path} - {response.status_code} ({duration:.2f}s)")
        return response
    except Exception as e:
        duration = (datetime.now(timezone.utc) - start_time).total_seconds()
        logger.error(f"[ERROR] {request.method} {request.url.path} - Error: {str(e)} ({duration:.2f}s)")
        raise


# ==================== ROUTERS ====================


app.include_router(auth_router, prefix="/api/auth", tags=["Authentication"])
app.include_router(buildings_router, prefix="/api/buildings", tags=["Buildings"])
app.include_router(units_router, prefix="/api/units", tags=["Units"])
app.include_router(customers_router, prefix="/api/customers", tags=["Customers"])
app.include_router(rentals_router, prefix="/api/rentals", tags=["Rentals"])
app.include_router(payments_router, prefix="/api/payments", tags=["Payments"])
app.include_router(dashboard_router, prefix="/api/dashboard", tags=["Dashboard"])


# ==================== ERROR HANDLERS ====================


@app.exception_handler(LedgerError)
async def ledger_exception_handler(request: Request, exc: LedgerError):
    """Domain and storage errors; status code comes from the error class"""
    content = {"success": False, "detail": exc.detail, "error": type(exc).__name__}
    if isinstance(exc, InconsistencyError):
        content["completed_steps"] = exc.completed_steps
        logger.error(f"Partial write on {request.url.path}: {exc.detail} (done: {exc.completed_steps})")
    elif exc.status_code >= 500:
        logger.error(f"Storage error on {request.url.path}: {exc.detail}")
    else:
        logger.info(f"Rejected {request.method} {request.url.path}: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors with detailed response"""
    logger.warning(f"Validation error on {request.url}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "success": False,
            "detail": "Validation error",
            "errors": jsonable_encoder(exc.errors())
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions"""
    logger.error(f"Unhandled exception: {exc}\n{traceback.format_exc()}")

    # Don't expose internal errors in production
    error_message = str(exc) if settings.DEBUG else "Internal server error"

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "detail": error_message,
            "timestamp": _now()
        }
    )


# ==================== HEALTH & STATUS ENDPOINTS ====================


@app.get("/", tags=["System"])
async def root():
    """Root endpoint - API information"""
    return {
        "success": True,
        "message": "Welcome to StoreKeep API",
        "app_name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "docs": "/api/docs",
        "status": "operational",
    }


@app.get("/health", tags=["System"])
async def health_check():
    """Health check endpoint"""
    connection_ok = True if settings.supabase_enabled else test_connection()
    return {
        "success": True,
        "status": "healthy" if connection_ok else "degraded",
        "database": "connected" if connection_ok else "disconnected",
        "timestamp": _now(),
    }


@app.get("/status", tags=["System"])
async def status_check():
    """Detailed status check"""
    return {
        "success": True,
        "status": "operational",
        "timestamp": _now(),
        "service": {
            "name": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "environment": "development" if settings.DEBUG else "production",
            "storage_backend": "supabase" if settings.supabase_enabled else "sql",
        },
        "features": {
            "expiry_check": "enabled" if settings.EXPIRY_CHECK_ENABLED else "on list only",
            "expiry_check_interval_seconds": settings.EXPIRY_CHECK_INTERVAL_SECONDS,
        }
    }
