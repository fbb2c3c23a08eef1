"""
Adwarden - FastAPI Application Entry Point
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from adwarden.core.config import settings
from adwarden.core.exceptions import AdwardenError
from adwarden.core.redis import close_redis_client, create_redis_client
from adwarden.api.routes import api_router
from adwarden.schemas.common import ErrorResponse

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT}, debug: {settings.DEBUG}")

    app.state.redis = create_redis_client()

    if settings.SCHEDULER_ENABLED:
        from adwarden.tasks.scheduler import start_scheduler
        start_scheduler()

    yield

    # Shutdown
    if settings.SCHEDULER_ENABLED:
        from adwarden.tasks.scheduler import stop_scheduler
        stop_scheduler()

    await close_redis_client(app.state.redis)
    logger.info(f"Shutting down {settings.APP_NAME}")


async def adwarden_error_handler(request: Request, exc: AdwardenError) -> JSONResponse:
    payload = ErrorResponse(error=exc.error, details=exc.details)
    return JSONResponse(
        status_code=exc.status_code,
        content=payload.model_dump(exclude_none=True),
    )


def create_app() -> FastAPI:
    """Create FastAPI application"""

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Campaign eligibility and serving engine for the browser extension",
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AdwardenError, adwarden_error_handler)

    # Include API routers
    app.include_router(api_router)

    return app


# Create app instance
app = create_app()
