"""
API tests for the clothing endpoints.
"""

from contextlib import contextmanager

import pytest
from fastapi import HTTPException

from styleai.api.dependencies import SnowflakeConnectionDep, get_clothing_repository, get_storage_client
from styleai.api.routes.clothing import create_clothing_item
from styleai.infrastructure.auth.client import AuthenticatedUser
from styleai.infrastructure.snowflake import client as snowflake_client
from styleai.infrastructure.snowflake.client import SnowflakeConnectionError
from styleai.infrastructure.snowflake.mock import MockSnowflakeConnection
from styleai.infrastructure.snowflake.repositories import ClothingItemRepository
from styleai.infrastructure.storage.client import MockStorageClient, StorageError

from conftest import AUTH, OTHER_AUTH, build_settings


class FailingUploadStorage(MockStorageClient):
    async def upload_photo(self, *args, **kwargs):
        raise StorageError("bucket unavailable")


class FailingInsertRepository:
    def add_item(self, item):
        raise RuntimeError("insert failed")

    def list_for_user(self, user_id):
        raise RuntimeError("select failed")


class FailingDeleteRepository(ClothingItemRepository):
    def delete_item(self, item_id, user_id):
        raise RuntimeError("delete failed")


def _failing_delete_repository(conn: SnowflakeConnectionDep) -> FailingDeleteRepository:
    return FailingDeleteRepository(conn)


class FailingPhotoDeleteStorage(MockStorageClient):
    async def delete_photos(self, storage_paths):
        raise StorageError("bucket unavailable")


class RecordingUpload:
    """Minimal UploadFile stand-in that records how much was read."""

    content_type = "image/jpeg"
    filename = "big.jpg"

    def __init__(self, data: bytes, size=None) -> None:
        self.data = data
        self.size = size
        self.read_sizes: list[int] = []

    async def read(self, size: int = -1) -> bytes:
        self.read_sizes.append(size)
        return self.data if size < 0 else self.data[:size]


@contextmanager
def _unreachable_database(config):
    raise SnowflakeConnectionError("Database connection failed: timeout")
    yield


async def _create_directly(photo: RecordingUpload, max_photo_size_mb: int = 1):
    return await create_clothing_item(
        user=AuthenticatedUser(id="user-1"),
        settings=build_settings(max_photo_size_mb=max_photo_size_mb),
        repository=ClothingItemRepository(MockSnowflakeConnection()),
        storage=MockStorageClient(),
        photo=photo,
        item_type="shirt",
        color=None,
        style_tags=None,
        season=None,
    )


def _post(client, headers=AUTH, files=None, **data):
    if files is None:
        files = {"photo": ("shirt.jpg", b"fake-image-bytes", "image/jpeg")}
    return client.post("/api/clothing", headers=headers, files=files, data=data)


# ---------------------------------------------------------------------------
# POST /api/clothing
# ---------------------------------------------------------------------------

class TestCreateClothingItem:

    def test_creates_item(self, client, storage):
        response = _post(
            client,
            item_type="  shirt ",
            color=" navy ",
            style_tags='["casual", "striped"]',
            season="summer",
        )

        assert response.status_code == 201
        body = response.json()
        assert body["user_id"] == "user-1"
        assert body["item_type"] == "shirt"
        assert body["color"] == "navy"
        assert body["style_tags"] == ["casual", "striped"]
        assert body["season"] == "summer"
        assert body["photo_url"].startswith("user-1/")
        assert body["photo_url"].endswith(".jpg")
        assert body["photo_signed_url"] == f"mock://storage/{body['photo_url']}?expires_in=3600"
        assert storage.has_photo(body["photo_url"])

    def test_comma_separated_tags(self, client):
        response = _post(client, item_type="shirt", style_tags="casual, striped,")

        assert response.json()["style_tags"] == ["casual", "striped"]

    def test_blank_optional_fields_become_null(self, client):
        response = _post(client, item_type="shirt", color="  ", season="")

        body = response.json()
        assert body["color"] is None
        assert body["season"] is None
        assert body["style_tags"] == []

    def test_extension_comes_from_filename(self, client):
        response = _post(
            client,
            files={"photo": ("shoe.png", b"png-bytes", "image/png")},
            item_type="shoes",
        )

        assert response.json()["photo_url"].endswith(".png")

    def test_missing_extension_defaults_to_jpg(self, client):
        response = _post(
            client,
            files={"photo": ("upload", b"bytes", "image/webp")},
            item_type="hat",
        )

        assert response.json()["photo_url"].endswith(".jpg")

    def test_photo_is_required(self, client):
        response = client.post("/api/clothing", headers=AUTH, data={"item_type": "shirt"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Photo file is required"

    def test_rejects_non_image(self, client):
        response = _post(
            client,
            files={"photo": ("notes.txt", b"hello", "text/plain")},
            item_type="shirt",
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid file type. Allowed: jpeg, png, webp, gif"

    def test_rejects_oversized_photo(self, client, configure):
        configure(max_photo_size_mb=1)

        response = _post(
            client,
            files={"photo": ("big.jpg", b"x" * (1024 * 1024 + 1), "image/jpeg")},
            item_type="shirt",
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "File too large. Maximum 1MB."

    def test_photo_at_size_limit_is_accepted(self, client, configure):
        configure(max_photo_size_mb=1)

        response = _post(
            client,
            files={"photo": ("big.jpg", b"x" * (1024 * 1024), "image/jpeg")},
            item_type="shirt",
        )

        assert response.status_code == 201

    async def test_oversized_photo_is_read_only_past_the_limit(self):
        photo = RecordingUpload(b"x" * (3 * 1024 * 1024))

        with pytest.raises(HTTPException) as exc_info:
            await _create_directly(photo)

        assert exc_info.value.status_code == 400
        assert photo.read_sizes == [1024 * 1024 + 1]

    async def test_declared_oversized_photo_is_not_read(self):
        photo = RecordingUpload(b"x" * (3 * 1024 * 1024), size=3 * 1024 * 1024)

        with pytest.raises(HTTPException) as exc_info:
            await _create_directly(photo)

        assert exc_info.value.detail == "File too large. Maximum 1MB."
        assert photo.read_sizes == []

    @pytest.mark.parametrize("data", [{}, {"item_type": "   "}])
    def test_item_type_is_required(self, client, data):
        response = _post(client, **data)

        assert response.status_code == 400
        assert response.json()["detail"] == "item_type is required"

    def test_upload_failure_is_500(self, client, app):
        app.dependency_overrides[get_storage_client] = lambda: FailingUploadStorage()

        response = _post(client, item_type="shirt")

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to upload photo"

    def test_insert_failure_removes_uploaded_photo(self, client, app, storage):
        app.dependency_overrides[get_clothing_repository] = lambda: FailingInsertRepository()

        response = _post(client, item_type="shirt")

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to save clothing item"
        assert storage._photos == {}


# ---------------------------------------------------------------------------
# GET /api/clothing
# ---------------------------------------------------------------------------

class TestListClothingItems:

    def test_empty_wardrobe(self, client):
        response = client.get("/api/clothing", headers=AUTH)

        assert response.status_code == 200
        assert response.json() == []

    def test_newest_first_with_signed_urls(self, client, add_item):
        first = add_item("shirt")
        second = add_item("pants")

        items = client.get("/api/clothing", headers=AUTH).json()

        assert [item["id"] for item in items] == [second["id"], first["id"]]
        assert all(item["photo_signed_url"].startswith("mock://storage/") for item in items)

    def test_only_own_items_are_listed(self, client, add_item):
        add_item("shirt")

        response = client.get("/api/clothing", headers=OTHER_AUTH)

        assert response.json() == []

    def test_fetch_failure_is_500(self, client, app):
        app.dependency_overrides[get_clothing_repository] = lambda: FailingInsertRepository()

        response = client.get("/api/clothing", headers=AUTH)

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to fetch clothing items"

    def test_database_outage_uses_route_message(self, client, configure, monkeypatch):
        monkeypatch.setattr(snowflake_client, "get_snowflake_connection", _unreachable_database)
        configure(snowflake_mock_mode=False)

        response = client.get("/api/clothing", headers=AUTH)

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to fetch clothing items"


# ---------------------------------------------------------------------------
# DELETE /api/clothing/{id} and GET /api/clothing/{id}/photo-url
# ---------------------------------------------------------------------------

class TestDeleteClothingItem:

    def test_deletes_row_and_photo(self, client, add_item, storage):
        item = add_item("shirt")

        response = client.delete(f"/api/clothing/{item['id']}", headers=AUTH)

        assert response.status_code == 204
        assert response.content == b""
        assert not storage.has_photo(item["photo_url"])
        assert client.get("/api/clothing", headers=AUTH).json() == []

    def test_unknown_item_is_404(self, client):
        response = client.delete("/api/clothing/does-not-exist", headers=AUTH)

        assert response.status_code == 404
        assert response.json()["detail"] == "Clothing item not found"

    def test_cannot_delete_someone_elses_item(self, client, add_item, storage):
        item = add_item("shirt")

        response = client.delete(f"/api/clothing/{item['id']}", headers=OTHER_AUTH)

        assert response.status_code == 404
        assert storage.has_photo(item["photo_url"])
        assert len(client.get("/api/clothing", headers=AUTH).json()) == 1

    def test_row_delete_failure_is_500(self, client, app, add_item):
        item = add_item("shirt")
        app.dependency_overrides[get_clothing_repository] = _failing_delete_repository

        response = client.delete(f"/api/clothing/{item['id']}", headers=AUTH)

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to delete clothing item"
        assert len(client.get("/api/clothing", headers=AUTH).json()) == 1

    def test_photo_delete_failure_still_deletes_row(self, client, app, add_item, caplog):
        item = add_item("shirt")
        app.dependency_overrides[get_storage_client] = lambda: FailingPhotoDeleteStorage()

        response = client.delete(f"/api/clothing/{item['id']}", headers=AUTH)

        assert response.status_code == 204
        assert "Failed to delete photo" in caplog.text
        assert client.get("/api/clothing", headers=AUTH).json() == []


class TestPhotoUrl:

    def test_returns_fresh_url(self, client, add_item):
        item = add_item("shirt")

        response = client.get(f"/api/clothing/{item['id']}/photo-url", headers=AUTH)

        assert response.status_code == 200
        assert response.json() == {
            "url": f"mock://storage/{item['photo_url']}?expires_in=3600",
            "expires_in": 3600,
        }

    def test_other_users_item_is_404(self, client, add_item):
        item = add_item("shirt")

        response = client.get(f"/api/clothing/{item['id']}/photo-url", headers=OTHER_AUTH)

        assert response.status_code == 404
