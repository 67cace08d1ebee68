"""
Health check endpoints.

We provide two endpoints:
- /api/health: Liveness check (is the process running?)
- /api/health/ready: Readiness check (can we serve traffic?)

Liveness never touches external services, so a slow database can't get
the process restarted. Readiness does, and answers 503 when something
the API depends on is missing.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from ... import __version__
from ...infrastructure.snowflake.client import check_connection, create_snowflake_connection
from ..dependencies import SettingsDep, build_snowflake_config

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    """
    Health check response.

    Standardized format makes it easy for monitoring tools to parse.
    """
    status: str
    message: str
    timestamp: datetime
    version: str
    database_connected: bool
    mock_mode: dict[str, Any] = {}


class ReadinessCheck(BaseModel):
    """Individual readiness check result."""
    name: str
    status: str  # "ok" or "error"
    error: str | None = None


class ReadinessResponse(BaseModel):
    """Readiness check response with details."""
    status: str  # "ready" or "not_ready"
    version: str
    checks: list[ReadinessCheck]


@router.get(
    "",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
    description="Returns 200 if the service is running. Does not check dependencies.",
)
async def health_check(settings: SettingsDep) -> HealthResponse:
    """
    Liveness check - is the process alive?

    database_connected reports whether a database is configured (or
    mocked); it doesn't open a connection.
    """
    database_configured = settings.snowflake_mock_mode or bool(
        settings.snowflake_account and settings.snowflake_user
    )

    return HealthResponse(
        status="ok",
        message="StyleAI backend is running",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        database_connected=database_configured,
        mock_mode={
            "auth": settings.auth_mock_mode,
            "snowflake": settings.snowflake_mock_mode,
            "r2": settings.r2_mock_mode,
            "weather": settings.weather_mock_mode,
        },
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    status_code=status.HTTP_200_OK,
    summary="Readiness check",
    description="Returns 200 if the service can handle traffic. Checks external dependencies.",
    responses={
        503: {
            "description": "Service not ready",
            "model": ReadinessResponse,
        }
    },
)
async def readiness_check(
    settings: SettingsDep,
    response: Response,
) -> ReadinessResponse:
    """
    Readiness check - can we serve traffic?

    Checks configuration, a round trip to the database, and that the
    LLM and weather services have credentials. Returns 503 if any
    check fails, which tells load balancers not to route traffic here.
    """
    checks: list[ReadinessCheck] = []

    # Configuration
    missing_fields = settings.validate_required_fields()
    if missing_fields:
        checks.append(ReadinessCheck(
            name="configuration",
            status="error",
            error=f"Missing required fields: {', '.join(missing_fields)}"
        ))
    else:
        checks.append(ReadinessCheck(name="configuration", status="ok"))

    # Database
    if settings.snowflake_mock_mode:
        checks.append(ReadinessCheck(name="database", status="ok", error="mock mode"))
    else:
        try:
            with create_snowflake_connection(config=build_snowflake_config(settings)) as conn:
                check_connection(conn)
            checks.append(ReadinessCheck(name="database", status="ok"))
        except Exception as e:
            logger.error("Database health check failed", extra={"error": str(e)})
            checks.append(ReadinessCheck(name="database", status="error", error=str(e)))

    # Anthropic API key
    if settings.anthropic_api_key.strip():
        checks.append(ReadinessCheck(name="anthropic", status="ok"))
    else:
        checks.append(ReadinessCheck(name="anthropic", status="error", error="API key not configured"))

    # Weather
    if settings.weather_mock_mode:
        checks.append(ReadinessCheck(name="weather", status="ok", error="mock mode"))
    elif settings.openweather_api_key:
        checks.append(ReadinessCheck(name="weather", status="ok"))
    else:
        checks.append(ReadinessCheck(name="weather", status="error", error="API key not configured"))

    all_ok = all(check.status == "ok" for check in checks)

    if not all_ok:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        logger.warning(
            "Readiness check failed",
            extra={
                "checks": [
                    {"name": c.name, "status": c.status, "error": c.error}
                    for c in checks
                ]
            }
        )

    return ReadinessResponse(
        status="ready" if all_ok else "not_ready",
        version=__version__,
        checks=checks,
    )
