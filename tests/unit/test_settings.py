"""
Unit tests for configuration parsing.
"""

import pytest

from styleai.config.settings import Settings


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep a developer's .env and shell variables out of these tests."""
    monkeypatch.chdir(tmp_path)
    for name in ("SUPABASE_URL", "SUPABASE_ANON_KEY", "ANTHROPIC_API_KEY", "OPENWEATHER_API_KEY"):
        monkeypatch.delenv(name, raising=False)


def test_cors_origins_are_split():
    settings = Settings(cors_origins="http://a.test, http://b.test,")

    assert settings.cors_origins_list == ["http://a.test", "http://b.test"]


def test_cors_wildcard():
    assert Settings(cors_origins="*").cors_origins_list == ["*"]


def test_mock_tokens_parse_user_and_optional_email():
    settings = Settings(auth_mock_tokens="t1:user-1:a@example.com, t2:user-2, broken, :user-3")

    assert settings.auth_mock_tokens_map == {
        "t1": ("user-1", "a@example.com"),
        "t2": ("user-2", None),
    }


def test_auth_configured_needs_supabase_or_mock():
    assert not Settings().auth_configured
    assert Settings(auth_mock_mode=True).auth_configured
    assert Settings(supabase_url="https://x.supabase.co", supabase_anon_key="anon").auth_configured


def test_r2_endpoint_built_from_account_id():
    assert Settings(r2_account_id="acct").r2_endpoint == "https://acct.r2.cloudflarestorage.com"
    assert Settings(r2_endpoint_url="http://minio:9000").r2_endpoint == "http://minio:9000"


def test_max_photo_size_bytes():
    assert Settings(max_photo_size_mb=5).max_photo_size_bytes == 5 * 1024 * 1024


def test_required_fields_respect_mock_modes():
    settings = Settings(
        auth_mock_mode=True,
        snowflake_mock_mode=True,
        r2_mock_mode=True,
        weather_mock_mode=True,
    )

    assert settings.validate_required_fields() == ["ANTHROPIC_API_KEY"]


def test_required_fields_without_mocks():
    missing = Settings().validate_required_fields()

    assert "SUPABASE_URL" in missing
    assert "OPENWEATHER_API_KEY" in missing
    assert "SNOWFLAKE_ACCOUNT" in missing
    assert "R2_ACCESS_KEY_ID" in missing
