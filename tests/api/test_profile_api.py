"""
API tests for the user profile endpoints.
"""

from styleai.api.dependencies import get_profile_repository

from conftest import AUTH, OTHER_AUTH


class BrokenProfileRepository:
    def get_profile(self, user_id):
        raise RuntimeError("database unavailable")

    def save_profile(self, profile):
        raise RuntimeError("database unavailable")


def test_no_profile_is_null(client):
    response = client.get("/api/user/profile", headers=AUTH)

    assert response.status_code == 200
    assert response.json() is None


def test_put_creates_profile(client):
    response = client.put(
        "/api/user/profile",
        headers=AUTH,
        json={
            "style_preference": "smart casual",
            "gender": "male",
            "body_type": " athletic ",
            "size_top": "M",
            "budget_range": "$$",
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["user_id"] == "user-1"
    assert body["style_preference"] == "smart casual"
    assert body["gender"] == "male"
    assert body["body_type"] == "athletic"
    assert body["size_top"] == "M"
    assert body["size_bottom"] is None
    assert body["budget_range"] == "$$"
    assert body["updated_at"]

    assert client.get("/api/user/profile", headers=AUTH).json() == body


def test_partial_update_keeps_other_fields(client):
    client.put("/api/user/profile", headers=AUTH, json={"style_preference": "casual", "size_shoes": "10"})

    response = client.put("/api/user/profile", headers=AUTH, json={"size_shoes": "11"})

    body = response.json()
    assert body["style_preference"] == "casual"
    assert body["size_shoes"] == "11"


def test_invalid_options_and_blank_text_become_null(client):
    client.put("/api/user/profile", headers=AUTH, json={"style_preference": "casual", "size_top": "M"})

    response = client.put(
        "/api/user/profile",
        headers=AUTH,
        json={"style_preference": "goth", "budget_range": "$$$$$", "size_top": "   "},
    )

    body = response.json()
    assert body["style_preference"] is None
    assert body["budget_range"] is None
    assert body["size_top"] is None


def test_unknown_keys_are_ignored(client):
    response = client.put("/api/user/profile", headers=AUTH, json={"user_id": "someone-else", "gender": "female"})

    assert response.status_code == 200
    assert response.json()["user_id"] == "user-1"


def test_profiles_are_per_user(client):
    client.put("/api/user/profile", headers=AUTH, json={"gender": "female"})

    assert client.get("/api/user/profile", headers=OTHER_AUTH).json() is None


def test_fetch_failure_is_500(client, app):
    app.dependency_overrides[get_profile_repository] = lambda: BrokenProfileRepository()

    response = client.get("/api/user/profile", headers=AUTH)

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to fetch profile"


def test_save_failure_is_500(client, app):
    app.dependency_overrides[get_profile_repository] = lambda: BrokenProfileRepository()

    response = client.put("/api/user/profile", headers=AUTH, json={"gender": "female"})

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to save profile"
