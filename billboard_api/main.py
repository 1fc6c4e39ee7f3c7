"""
Main FastAPI application module.
"""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.staticfiles import StaticFiles

from billboard_api.api.v1.router import api_router
from billboard_api.core.config import settings
from billboard_api.core.database import close_database
from billboard_api.core.db_init import init_db
from billboard_api.core.exceptions import register_exception_handlers
from billboard_api.core.logging import get_logger, setup_logging
from billboard_api.core.middleware import (
    LoggingMiddleware,
    RateLimitMiddleware,
    RequestIDMiddleware,
)
from billboard_api.core.redis import close_redis, init_redis
from billboard_api.services.notifications import NotificationService

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Handle application startup and shutdown events.
    """
    # Startup
    setup_logging()
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
    await init_redis()
    await init_db()
    app.state.notifier = NotificationService(settings)
    logger.info(
        "application_started",
        environment=settings.environment,
        email_enabled=app.state.notifier.is_email_configured,
        sms_enabled=app.state.notifier.is_sms_configured,
    )

    yield

    # Shutdown
    await app.state.notifier.close()
    await close_redis()
    await close_database()
    logger.info("application_stopped")


def create_application() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
        openapi_url="/api/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    # Add middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    app.add_middleware(GZipMiddleware, minimum_size=1000)

    if settings.is_production:
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.allowed_hosts)

    # Add custom middleware
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    if settings.rate_limit_enabled:
        app.add_middleware(RateLimitMiddleware)

    # Include API routes
    app.include_router(api_router, prefix="/api/v1")

    # Uploaded billboard images
    app.mount(
        settings.upload_url_prefix,
        StaticFiles(directory=settings.upload_dir, check_dir=False),
        name="uploads",
    )

    return app


# Create the application instance
app = create_application()
