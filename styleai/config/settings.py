"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables with sensible defaults.
Using Pydantic's BaseSettings means we get:
- Type validation at startup (fail fast if config is wrong)
- Documentation of what's required vs optional
- Easy testing with different configurations

Mock modes enable local development without external services.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    For lists (like cors_origins), use comma-separated values in env.
    """

    # API Configuration
    api_title: str = "StyleAI API"

    # Supabase Auth Configuration
    supabase_url: str = Field(
        default="",
        description="Supabase project URL. Access tokens are verified against its Auth service."
    )
    supabase_anon_key: str = Field(
        default="",
        description="Supabase anon (public) key used for token verification."
    )
    auth_mock_mode: bool = Field(
        default=False,
        description="Accept tokens from AUTH_MOCK_TOKENS instead of calling Supabase. Local dev only."
    )
    auth_mock_tokens: str = Field(
        default="dev-token:00000000-0000-0000-0000-000000000001",
        description="Comma-separated token:user_id[:email] entries accepted in mock mode."
    )

    # Anthropic Configuration
    anthropic_api_key: str = Field(
        default="",
        description="Claude API key. Required for outfit generation."
    )
    anthropic_model: str = Field(
        default="claude-sonnet-4-6",
        description="Claude model used by the stylist."
    )
    anthropic_max_tokens: int = Field(
        default=512,
        description="Max tokens for Claude responses. Outfit replies are short JSON objects."
    )
    anthropic_temperature: float = Field(
        default=0.7,
        description="Temperature for Claude. Some variety keeps repeated suggestions fresh."
    )

    # Weather Configuration
    openweather_api_key: str = Field(
        default="",
        description="OpenWeatherMap API key"
    )
    openweather_url: str = Field(
        default="https://api.openweathermap.org/data/2.5/weather",
        description="OpenWeatherMap current weather endpoint"
    )
    weather_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for weather requests"
    )
    weather_mock_mode: bool = Field(
        default=False,
        description="Return canned weather instead of calling OpenWeatherMap."
    )

    # Snowflake Configuration
    snowflake_account: str = Field(
        default="",
        description="Snowflake account identifier"
    )
    snowflake_user: str = Field(
        default="",
        description="Snowflake service account username"
    )
    snowflake_password: str = Field(
        default="",
        description="Snowflake service account password"
    )
    snowflake_private_key_path: Optional[str] = Field(
        default=None,
        description="Path to RSA private key file for key-pair authentication"
    )
    snowflake_private_key_base64: Optional[str] = Field(
        default=None,
        description="Base64-encoded private key (for deployment, alternative to file path)"
    )
    snowflake_database: str = Field(
        default="STYLEAI",
        description="Snowflake database name"
    )
    snowflake_schema: str = Field(
        default="WARDROBE",
        description="Snowflake schema name"
    )
    snowflake_warehouse: str = Field(
        default="COMPUTE_WH",
        description="Snowflake warehouse for query execution"
    )
    snowflake_role: Optional[str] = Field(
        default=None,
        description="Snowflake role to use (optional)"
    )
    snowflake_mock_mode: bool = Field(
        default=False,
        description="Use in-memory mock instead of real Snowflake connection. Enables local dev without DB."
    )

    # R2/S3 Storage Configuration
    r2_account_id: str = Field(
        default="",
        description="Cloudflare account ID for R2"
    )
    r2_access_key_id: str = Field(
        default="",
        description="R2 access key ID"
    )
    r2_secret_access_key: str = Field(
        default="",
        description="R2 secret access key"
    )
    r2_bucket_name: str = Field(
        default="clothing-photos",
        description="R2 bucket name for clothing photos"
    )
    r2_endpoint_url: Optional[str] = Field(
        default=None,
        description="R2 endpoint URL. Auto-constructed from account_id if not provided."
    )
    r2_mock_mode: bool = Field(
        default=False,
        description="Use in-memory mock instead of real R2. Enables local dev without object storage."
    )

    # Application Behavior
    max_photo_size_mb: int = Field(
        default=5,
        description="Maximum clothing photo size in MB."
    )
    photo_url_expiry_seconds: int = Field(
        default=3600,
        description="Lifetime of presigned photo URLs handed to clients."
    )
    default_city: str = Field(
        default="London",
        description="City used for outfit weather when the client doesn't send one."
    )
    outfit_generation_daily_limit: int = Field(
        default=20,
        description="Outfit generations allowed per user per day. Caps LLM spend."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:5173,http://localhost:3000",
        description="Comma-separated list of allowed CORS origins. Use * for development only."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def auth_mock_tokens_map(self) -> dict[str, tuple[str, Optional[str]]]:
        """
        Parse mock tokens into {token: (user_id, email)}.

        Entries without a user id are ignored.
        """
        tokens: dict[str, tuple[str, Optional[str]]] = {}
        for entry in self.auth_mock_tokens.split(","):
            parts = [part.strip() for part in entry.split(":")]
            if len(parts) < 2 or not parts[0] or not parts[1]:
                continue
            email = parts[2] if len(parts) > 2 and parts[2] else None
            tokens[parts[0]] = (parts[1], email)
        return tokens

    @property
    def auth_configured(self) -> bool:
        return self.auth_mock_mode or bool(self.supabase_url and self.supabase_anon_key)

    @property
    def max_photo_size_bytes(self) -> int:
        return self.max_photo_size_mb * 1024 * 1024

    @property
    def r2_endpoint(self) -> str:
        """
        Construct R2 endpoint URL from account ID.

        R2 endpoints follow the pattern: https://{account_id}.r2.cloudflarestorage.com
        """
        if self.r2_endpoint_url:
            return self.r2_endpoint_url
        return f"https://{self.r2_account_id}.r2.cloudflarestorage.com"

    def validate_required_fields(self) -> list[str]:
        """
        Validate that required fields are set based on mock mode settings.

        Returns list of missing required fields.
        This is separate from Pydantic validation because requirements
        depend on whether we're in mock mode.
        """
        missing = []

        if not self.auth_mock_mode:
            if not self.supabase_url:
                missing.append("SUPABASE_URL")
            if not self.supabase_anon_key:
                missing.append("SUPABASE_ANON_KEY")

        # No mock for the LLM
        if not self.anthropic_api_key:
            missing.append("ANTHROPIC_API_KEY")

        if not self.weather_mock_mode and not self.openweather_api_key:
            missing.append("OPENWEATHER_API_KEY")

        if not self.snowflake_mock_mode and not self.snowflake_private_key_path:
            if not self.snowflake_account:
                missing.append("SNOWFLAKE_ACCOUNT")
            if not self.snowflake_user:
                missing.append("SNOWFLAKE_USER")
            if not self.snowflake_password and not self.snowflake_private_key_base64:
                missing.append("SNOWFLAKE_PASSWORD or SNOWFLAKE_PRIVATE_KEY_PATH")

        if not self.r2_mock_mode:
            if not self.r2_account_id and not self.r2_endpoint_url:
                missing.append("R2_ACCOUNT_ID")
            if not self.r2_access_key_id:
                missing.append("R2_ACCESS_KEY_ID")
            if not self.r2_secret_access_key:
                missing.append("R2_SECRET_ACCESS_KEY")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache means we only load settings once per process.
    For tests, you can call get_settings.cache_clear() to reset.
    """
    return Settings()
