"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from src.api.middleware.error_handler import error_handler_middleware, register_exception_handlers
from src.api.middleware.latency_logging import latency_logging_with_stats_middleware
from src.api.middleware.request_size import request_size_limit_middleware
from src.api.routes import (
    activities,
    admin,
    auth,
    contracts,
    health,
    jobs,
    messages,
    notifications,
    proposals,
    reviews,
    tickets,
    users,
)
from src.core.config import get_settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Args:
        app: FastAPI application instance.

    Yields:
        None: Control back to the application.
    """
    settings = get_settings()
    logger.info("Starting %s in %s mode", settings.app_name, settings.app_env)
    if not settings.identity_provider_enabled:
        logger.info("Identity provider disabled; signup creates local accounts only")
    elif not settings.supabase_signing_key_jwk:
        logger.warning("No provider signing key configured; provider tokens will be rejected")

    yield

    logger.info("Shutting down %s", settings.app_name)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="Freelance Marketplace API",
        description="Jobs, proposals, contracts, messaging and activity feed for a freelance marketplace",
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Error handler middleware formats anything the exception handlers miss
    app.add_middleware(BaseHTTPMiddleware, dispatch=error_handler_middleware)

    app.add_middleware(BaseHTTPMiddleware, dispatch=latency_logging_with_stats_middleware)

    # Add request size limit middleware (rejects oversized requests early)
    app.add_middleware(BaseHTTPMiddleware, dispatch=request_size_limit_middleware)

    # Mount health routes at root level (no prefix)
    app.include_router(health.router)

    api_router = APIRouter(prefix="/api")
    api_router.include_router(auth.router)
    api_router.include_router(users.router)
    api_router.include_router(jobs.router)
    api_router.include_router(proposals.router)
    api_router.include_router(messages.router)
    api_router.include_router(contracts.router)
    api_router.include_router(reviews.router)
    api_router.include_router(notifications.router)
    api_router.include_router(tickets.router)
    api_router.include_router(activities.router)
    api_router.include_router(admin.router)

    app.include_router(api_router)

    return app


# Create application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "src.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
