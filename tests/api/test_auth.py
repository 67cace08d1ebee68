"""
API tests for bearer token authentication.
"""

from types import SimpleNamespace

import httpx
from supabase import AuthApiError

from styleai.api.dependencies import get_token_verifier
from styleai.infrastructure.auth.client import SupabaseTokenVerifier

from conftest import AUTH


class NoUserVerifier:
    async def get_user(self, access_token):
        return None


class ExplodingVerifier:
    async def get_user(self, access_token):
        raise RuntimeError("auth service down")


class FailingSupabaseAuth:
    def __init__(self, error):
        self.error = error

    def get_user(self, access_token):
        raise self.error


def _supabase_verifier(error) -> SupabaseTokenVerifier:
    client = SimpleNamespace(auth=FailingSupabaseAuth(error))
    return SupabaseTokenVerifier("https://example.supabase.co", "anon-key", client=client)


def test_missing_header_is_401(client):
    response = client.get("/api/clothing")

    assert response.status_code == 401
    assert response.json()["detail"] == "Missing or invalid Authorization header"


def test_non_bearer_scheme_is_401(client):
    response = client.get("/api/clothing", headers={"Authorization": "Basic dXNlcjpwYXNz"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Missing or invalid Authorization header"


def test_unknown_token_is_401(client):
    response = client.get("/api/clothing", headers={"Authorization": "Bearer not-a-token"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid or expired token"


def test_valid_token_is_accepted(client):
    response = client.get("/api/clothing", headers=AUTH)

    assert response.status_code == 200


def test_unconfigured_auth_is_500(client, configure):
    configure(auth_mock_mode=False, supabase_url="", supabase_anon_key="")

    response = client.get("/api/clothing", headers=AUTH)

    assert response.status_code == 500
    assert response.json()["detail"] == "Server configuration error"


def test_token_without_user_is_401(client, app):
    app.dependency_overrides[get_token_verifier] = lambda: NoUserVerifier()

    response = client.get("/api/clothing", headers=AUTH)

    assert response.status_code == 401
    assert response.json()["detail"] == "User not found"


def test_verifier_failure_is_500(client, app):
    app.dependency_overrides[get_token_verifier] = lambda: ExplodingVerifier()

    response = client.get("/api/clothing", headers=AUTH)

    assert response.status_code == 500
    assert response.json()["detail"] == "Authentication failed"


def test_supabase_rejection_is_401(client, app):
    verifier = _supabase_verifier(AuthApiError("invalid JWT", 401, "bad_jwt"))
    app.dependency_overrides[get_token_verifier] = lambda: verifier

    response = client.get("/api/clothing", headers=AUTH)

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid or expired token"


def test_supabase_unreachable_is_500(client, app):
    verifier = _supabase_verifier(httpx.ConnectError("connection refused"))
    app.dependency_overrides[get_token_verifier] = lambda: verifier

    response = client.get("/api/clothing", headers=AUTH)

    assert response.status_code == 500
    assert response.json()["detail"] == "Authentication failed"


def test_every_wardrobe_route_requires_auth(client):
    requests = [
        ("get", "/api/clothing"),
        ("post", "/api/clothing"),
        ("delete", "/api/clothing/some-id"),
        ("get", "/api/clothing/some-id/photo-url"),
        ("get", "/api/user/profile"),
        ("put", "/api/user/profile"),
        ("get", "/api/weather?city=London"),
        ("post", "/api/outfits/generate"),
        ("get", "/api/outfits/usage"),
        ("post", "/api/outfits/gap-finder"),
    ]

    for method, path in requests:
        response = getattr(client, method)(path)
        assert response.status_code == 401, f"{method.upper()} {path}"
