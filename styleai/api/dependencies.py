"""
FastAPI dependency injection.

Dependencies provide instances of services, clients, and configuration
to route handlers. Routes never instantiate their own clients, so tests
can swap any of them through app.dependency_overrides.

In mock modes, backends are shared across requests so that data written
by one request is visible to the next during a local session.
"""

import logging
from typing import Annotated, Generator, Optional

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..config.settings import Settings, get_settings
from ..core.wardrobe.stylist import OutfitStylist
from ..infrastructure.anthropic.client import AnthropicConfig, AnthropicTextClient
from ..infrastructure.auth.client import (
    AuthenticatedUser,
    AuthVerificationError,
    TokenVerifier,
    create_token_verifier,
)
from ..infrastructure.snowflake.client import (
    LazySnowflakeConnection,
    SnowflakeConfig,
    SnowflakeConnection,
)
from ..infrastructure.snowflake.repositories.clothing import ClothingItemRepository
from ..infrastructure.snowflake.repositories.profiles import UserProfileRepository
from ..infrastructure.snowflake.repositories.usage_limits import UsageLimitRepository
from ..infrastructure.storage.client import PhotoStorage, StorageConfig, create_storage_client
from ..infrastructure.weather.client import WeatherClient, WeatherConfig, create_weather_client

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

# Global mock instances (shared across requests in mock mode)
_mock_storage_client: Optional[PhotoStorage] = None
_mock_snowflake_connection: Optional[SnowflakeConnection] = None
_mock_weather_client: Optional[WeatherClient] = None


def reset_mock_backends() -> None:
    """Drop shared mock state (for tests)."""
    global _mock_storage_client, _mock_snowflake_connection, _mock_weather_client
    _mock_storage_client = None
    _mock_snowflake_connection = None
    _mock_weather_client = None


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

def get_token_verifier(
    settings: Annotated[Settings, Depends(get_settings)],
) -> Optional[TokenVerifier]:
    """
    Provide the token verifier, or None when auth isn't configured.

    Returning None (rather than raising) lets require_user distinguish a
    server misconfiguration from a bad token.
    """
    if not settings.auth_configured:
        return None

    return create_token_verifier(
        supabase_url=settings.supabase_url,
        supabase_anon_key=settings.supabase_anon_key,
        mock_mode=settings.auth_mock_mode,
        mock_tokens=settings.auth_mock_tokens_map,
    )


async def require_user(
    verifier: Annotated[Optional[TokenVerifier], Depends(get_token_verifier)],
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> AuthenticatedUser:
    """
    Resolve the caller from "Authorization: Bearer <token>".

    Raises 401 for missing/invalid tokens and 500 if the server
    can't verify tokens at all.
    """
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        logger.warning("Request missing bearer token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid Authorization header",
        )

    if verifier is None:
        logger.error("Token verification not configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server configuration error",
        )

    token = credentials.credentials

    try:
        user = await verifier.get_user(token)
    except AuthVerificationError:
        logger.warning("Invalid token", extra={"token_prefix": token[:8]})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )
    except Exception as e:
        logger.error("Auth error", extra={"error": str(e)}, exc_info=e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Authentication failed",
        )

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    return user


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

def build_snowflake_config(settings: Settings) -> SnowflakeConfig:
    """Snowflake connection settings for the real (non-mock) database."""
    return SnowflakeConfig(
        account=settings.snowflake_account,
        user=settings.snowflake_user,
        password=settings.snowflake_password or None,
        private_key_path=settings.snowflake_private_key_path,
        private_key_base64=settings.snowflake_private_key_base64,
        database=settings.snowflake_database,
        schema=settings.snowflake_schema,
        warehouse=settings.snowflake_warehouse,
        role=settings.snowflake_role,
    )


def get_snowflake_connection(
    settings: Annotated[Settings, Depends(get_settings)],
) -> Generator[SnowflakeConnection, None, None]:
    """
    Provide one database connection per request.

    This is a generator so FastAPI closes the connection after the
    response. The real connection opens on first query, so a database
    outage is reported by the route that hit it. In mock mode, the same
    in-memory connection is reused so that data persists during the
    session.
    """
    global _mock_snowflake_connection

    if settings.snowflake_mock_mode:
        if _mock_snowflake_connection is None:
            from ..infrastructure.snowflake.mock import MockSnowflakeConnection
            _mock_snowflake_connection = MockSnowflakeConnection()
            logger.info("Created shared mock Snowflake connection")
        yield _mock_snowflake_connection
        return

    conn = LazySnowflakeConnection(build_snowflake_config(settings))
    try:
        yield conn
    finally:
        conn.close()


def get_clothing_repository(
    conn: Annotated[SnowflakeConnection, Depends(get_snowflake_connection)],
) -> ClothingItemRepository:
    return ClothingItemRepository(conn)


def get_profile_repository(
    conn: Annotated[SnowflakeConnection, Depends(get_snowflake_connection)],
) -> UserProfileRepository:
    return UserProfileRepository(conn)


def get_usage_limit_repository(
    conn: Annotated[SnowflakeConnection, Depends(get_snowflake_connection)],
) -> UsageLimitRepository:
    return UsageLimitRepository(conn)


# ---------------------------------------------------------------------------
# External Services
# ---------------------------------------------------------------------------

def get_storage_client(
    settings: Annotated[Settings, Depends(get_settings)],
) -> PhotoStorage:
    """
    Provide storage client for clothing photos.

    Returns either R2 client or mock client based on settings.
    """
    global _mock_storage_client

    if settings.r2_mock_mode:
        if _mock_storage_client is None:
            _mock_storage_client = create_storage_client(mock_mode=True)
            logger.info("Created shared mock storage client")
        return _mock_storage_client

    config = StorageConfig(
        access_key_id=settings.r2_access_key_id,
        secret_access_key=settings.r2_secret_access_key,
        bucket_name=settings.r2_bucket_name,
        endpoint_url=settings.r2_endpoint,
    )
    return create_storage_client(config=config)


def get_weather_client(
    settings: Annotated[Settings, Depends(get_settings)],
) -> WeatherClient:
    """Provide the weather client (OpenWeatherMap or mock)."""
    global _mock_weather_client

    if settings.weather_mock_mode:
        if _mock_weather_client is None:
            _mock_weather_client = create_weather_client(mock_mode=True)
        return _mock_weather_client

    config = WeatherConfig(
        api_key=settings.openweather_api_key,
        base_url=settings.openweather_url,
        timeout_seconds=settings.weather_timeout_seconds,
    )
    return create_weather_client(config=config)


def get_outfit_stylist(
    settings: Annotated[Settings, Depends(get_settings)],
) -> Optional[OutfitStylist]:
    """
    Provide an OutfitStylist backed by Claude, or None without an API key.

    The generate route turns None into a configuration error only after
    it has validated the wardrobe, so users with an empty wardrobe get
    the more useful message first.
    """
    if not settings.anthropic_api_key.strip():
        return None

    config = AnthropicConfig(
        api_key=settings.anthropic_api_key.strip(),
        model=settings.anthropic_model,
        max_tokens=settings.anthropic_max_tokens,
        temperature=settings.anthropic_temperature,
    )

    logger.debug("Created OutfitStylist instance")

    return OutfitStylist(model_client=AnthropicTextClient(config))


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

CurrentUser = Annotated[AuthenticatedUser, Depends(require_user)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
SnowflakeConnectionDep = Annotated[SnowflakeConnection, Depends(get_snowflake_connection)]
ClothingRepositoryDep = Annotated[ClothingItemRepository, Depends(get_clothing_repository)]
ProfileRepositoryDep = Annotated[UserProfileRepository, Depends(get_profile_repository)]
UsageLimitRepositoryDep = Annotated[UsageLimitRepository, Depends(get_usage_limit_repository)]
StorageClientDep = Annotated[PhotoStorage, Depends(get_storage_client)]
WeatherClientDep = Annotated[WeatherClient, Depends(get_weather_client)]
OutfitStylistDep = Annotated[Optional[OutfitStylist], Depends(get_outfit_stylist)]
