"""
FastAPI application entry point.

This module creates and configures the FastAPI application.
Using an application factory pattern (create_app function) because:
- Easier to test with different configurations
- Explicit about initialization order

For local development:
    uvicorn styleai.main:app --reload
    python -m styleai.main

For production:
    gunicorn styleai.main:app -w 4 -k uvicorn.workers.UvicornWorker
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api.routes import clothing, health, outfits, users, weather
from .config.settings import get_settings

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=get_settings().log_level.upper(),
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Runs on startup and shutdown. We only log configuration problems here:
    mock modes make partial configuration a normal state for local dev.
    """
    settings = get_settings()

    logger.info(
        "StyleAI API starting",
        extra={
            "version": __version__,
            "mock_mode": {
                "auth": settings.auth_mock_mode,
                "snowflake": settings.snowflake_mock_mode,
                "r2": settings.r2_mock_mode,
                "weather": settings.weather_mock_mode,
            }
        }
    )

    missing_fields = settings.validate_required_fields()
    if missing_fields:
        logger.error(
            "Missing required configuration",
            extra={"missing_fields": missing_fields}
        )

    yield

    logger.info("StyleAI API shutting down")


def create_app() -> FastAPI:
    """
    Application factory.

    Creates and configures the FastAPI application. Called once at
    import time for uvicorn, and again by tests that need fresh settings.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=__version__,
        description="""
        AI-assisted wardrobe and outfit planning.

        ## Features

        - Photograph and catalogue your clothing
        - Save style preferences, sizes and budget
        - Check the weather for any city
        - Get an outfit suggestion built from what you own

        ## Authentication

        Sign in with Supabase Auth and send the access token as
        `Authorization: Bearer <token>` on every `/api` request
        except health checks.

        ## Workflow

        1. **Add items**: `POST /api/clothing` (multipart photo + metadata)
        2. **Set preferences**: `PUT /api/user/profile`
        3. **Get dressed**: `POST /api/outfits/generate?city=London`
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware
    # Configure allowed origins via CORS_ORIGINS environment variable
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(
        health.router,
        prefix="/api/health",
        tags=["Health"],
    )

    app.include_router(
        clothing.router,
        prefix="/api/clothing",
        tags=["Clothing"],
    )

    app.include_router(
        users.router,
        prefix="/api/user",
        tags=["User"],
    )

    app.include_router(
        weather.router,
        prefix="/api/weather",
        tags=["Weather"],
    )

    app.include_router(
        outfits.router,
        prefix="/api/outfits",
        tags=["Outfits"],
    )

    @app.get("/api/ping", tags=["Health"], summary="Connectivity check")
    async def ping():
        return {"message": "pong"}

    # Root endpoint
    @app.get("/", include_in_schema=False)
    async def root():
        """Service banner pointing at the docs."""
        return {
            "message": "StyleAI API",
            "version": __version__,
            "docs": "/docs",
            "health": "/api/health",
        }

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Catch-all exception handler.

        Logs the full error server-side and returns a generic message,
        so stack traces never reach clients.
        """
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )

        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error. Please contact support if this persists."
            }
        )

    logger.info(
        "FastAPI application created",
        extra={
            "title": settings.api_title,
            "version": __version__,
        }
    )

    return app


# This is what uvicorn/gunicorn will import
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "styleai.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )
