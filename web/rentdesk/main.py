"""Main application entry point."""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from sqlalchemy import select

# Rate limiting
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from . import __version__
from .api.v1.api import api_v1_router
from .api.v1.middleware import base_error_handler, exception_handler, validation_exception_handler
from .core import BaseError, get_settings
from .deps import SessionDep
from .infrastructure.database import engine, AsyncSessionFactory
from .models import Base
from .services import AuthService, MaintenanceService
from . import storage

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("rentdesk")

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    enabled=settings.RATE_LIMIT_ENABLED,
)


async def _maintenance_loop():
    """Overdue rent, stale invitations and ended leases, once per interval"""
    while True:
        await asyncio.sleep(settings.MAINTENANCE_INTERVAL_SECONDS)
        try:
            async with AsyncSessionFactory() as sess:
                await MaintenanceService(sess).run()
                await sess.commit()
        except Exception:
            logger.exception("Maintenance pass failed")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    if settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD:
        async with AsyncSessionFactory() as s:
            await AuthService(s).ensure_admin(settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD)
            await s.commit()

    task = asyncio.create_task(_maintenance_loop())

    yield

    # Shutdown
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


# Create FastAPI app
app = FastAPI(
    title="RentDesk API",
    description="Property management for landlords and renters",
    version=__version__,
    lifespan=lifespan
)

# Attach rate-limiter
app.state.limiter = limiter

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"]
)


# Rate limiting
@app.exception_handler(RateLimitExceeded)
async def ratelimit_handler(request: Request, exc: RateLimitExceeded):
    return PlainTextResponse("Too many requests", status_code=429)

app.add_middleware(SlowAPIMiddleware)

# Exception handling
app.add_exception_handler(BaseError, base_error_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, exception_handler)

# Include v1 API with all endpoints
app.include_router(api_v1_router, prefix="/api/v1")


# Health check
@app.get("/healthz")
async def healthz(sess: SessionDep):
    """Health check endpoint."""
    status = {"db": "ok", "s3": "ok"}

    try:
        await sess.scalar(select(1))
    except Exception:
        logger.exception("Database health check failed")
        status["db"] = "error"

    try:
        storage.bucket_ok()
    except Exception:
        logger.exception("Storage health check failed")
        status["s3"] = "error"

    return status


# Root endpoint
@app.get("/")
async def root():
    """API root."""
    return {
        "message": f"Welcome to RentDesk API v{__version__}",
        "docs": "/docs",
        "health": "/healthz"
    }
