"""
Fixtures for API tests.

Every backend runs in mock mode: tokens come from a fixed map, rows live
in the in-memory Snowflake mock and photos in the mock storage client.
The LLM is replaced per test through app.dependency_overrides.
"""

from typing import Callable, Optional

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from styleai.api import dependencies
from styleai.api.dependencies import get_outfit_stylist, get_storage_client
from styleai.config.settings import Settings, get_settings
from styleai.core.wardrobe.stylist import OutfitStylist
from styleai.infrastructure.storage.client import MockStorageClient
from styleai.main import create_app

AUTH = {"Authorization": "Bearer token-1"}
OTHER_AUTH = {"Authorization": "Bearer token-2"}


class FakeModelClient:
    """Stands in for Claude: returns a fixed reply or raises."""

    def __init__(self, reply: str = "", error: Optional[Exception] = None) -> None:
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        self.prompts.append(user_prompt)
        if self.error is not None:
            raise self.error
        return self.reply


def build_settings(**overrides) -> Settings:
    values = dict(
        _env_file=None,
        auth_mock_mode=True,
        auth_mock_tokens="token-1:user-1:one@example.com,token-2:user-2",
        snowflake_mock_mode=True,
        r2_mock_mode=True,
        weather_mock_mode=True,
        anthropic_api_key="",
        openweather_api_key="",
        default_city="London",
        outfit_generation_daily_limit=20,
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture(autouse=True)
def reset_backends():
    get_settings.cache_clear()
    dependencies.reset_mock_backends()
    yield
    dependencies.reset_mock_backends()
    get_settings.cache_clear()


@pytest.fixture
def storage() -> MockStorageClient:
    return MockStorageClient()


@pytest.fixture
def app(storage) -> FastAPI:
    app = create_app()
    settings = build_settings()
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_storage_client] = lambda: storage
    return app


@pytest.fixture
def configure(app) -> Callable[..., Settings]:
    """Swap in settings with the given overrides."""

    def _configure(**overrides) -> Settings:
        settings = build_settings(**overrides)
        app.dependency_overrides[get_settings] = lambda: settings
        return settings

    return _configure


@pytest.fixture
def use_model(app) -> Callable[..., FakeModelClient]:
    """Install a fake LLM behind the real OutfitStylist."""

    def _use_model(reply: str = "", error: Optional[Exception] = None) -> FakeModelClient:
        model = FakeModelClient(reply=reply, error=error)
        app.dependency_overrides[get_outfit_stylist] = lambda: OutfitStylist(model)
        return model

    return _use_model


@pytest.fixture
def client(app) -> TestClient:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def add_item(client) -> Callable[..., dict]:
    """Upload a clothing item and return the created record."""

    def _add_item(item_type: str = "shirt", headers: dict = AUTH, **fields) -> dict:
        response = client.post(
            "/api/clothing",
            headers=headers,
            files={"photo": ("photo.jpg", b"fake-image-bytes", "image/jpeg")},
            data={"item_type": item_type, **fields},
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _add_item
