"""Main FastAPI application with all middleware"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from starlette.middleware.sessions import SessionMiddleware
from contextlib import asynccontextmanager
from slowapi.errors import RateLimitExceeded
import logging

from app.core.config import settings
from app.core.exceptions import (
    StorageError,
    StorefrontException,
    storage_exception_handler,
    storefront_exception_handler
)
from app.middleware.rate_limit import limiter, custom_rate_limit_handler
from app.middleware.security import SecurityMiddleware
from app.services.cart_storage import JsonFileCartStorage
from app.services.payment_gateway import RazorpayGateway
from app.services.session_registry import SessionRegistry

# Configure logging
logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    logger.info(f"Starting up {settings.APP_NAME}...")

    if getattr(app.state, "sessions", None) is None:
        app.state.sessions = SessionRegistry(JsonFileCartStorage(settings.CART_STORAGE_DIR))
        logger.info(f"Cart storage at {settings.CART_STORAGE_DIR}")

    if not hasattr(app.state, "payment_gateway"):
        if settings.razorpay_enabled:
            app.state.payment_gateway = RazorpayGateway()
            logger.info("Razorpay gateway initialized")
        else:
            app.state.payment_gateway = None
            logger.warning("Razorpay keys not set; only cash on delivery is available")

    if not hasattr(app.state, "upstream_transport"):
        app.state.upstream_transport = None

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.APP_NAME}...")


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Cart, discount and checkout API for the Vitals storefront",
    version=settings.APP_VERSION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    lifespan=lifespan
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, custom_rate_limit_handler)
app.add_exception_handler(StorefrontException, storefront_exception_handler)
app.add_exception_handler(StorageError, storage_exception_handler)

# Add middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=settings.ALLOWED_HOSTS
)

app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(SecurityMiddleware)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SECRET_KEY,
    session_cookie=settings.SESSION_COOKIE_NAME,
    max_age=settings.SESSION_MAX_AGE_SECONDS,
    same_site="lax",
    https_only=settings.ENVIRONMENT == "production"
)

# Include routers
from app.api.v1 import api_router
app.include_router(api_router, prefix="/api/v1")


# Health check
@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "online_payments": getattr(app.state, "payment_gateway", None) is not None
    }


# Root endpoint
@app.get("/")
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "docs": "/api/docs",
        "health": "/health"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        workers=settings.WORKERS
    )
