"""
Application configuration.

Settings come from environment variables (or .env) with mock modes
for running locally without Supabase, Snowflake, R2 or OpenWeatherMap.
"""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
