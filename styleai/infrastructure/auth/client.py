"""
Access token verification.

Clients sign in with Supabase Auth in the browser and send the resulting
access token as "Authorization: Bearer <token>". We ask Supabase who the
token belongs to; we never issue or refresh tokens ourselves.

Mock mode accepts a fixed set of tokens from configuration, enabling local
development without a Supabase project.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from supabase import AuthApiError, create_client

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Base class for authentication failures."""
    pass


class AuthNotConfiguredError(AuthError):
    """Raised when there is nothing to verify tokens against."""
    pass


class AuthVerificationError(AuthError):
    """Raised when a token is rejected (invalid, expired, revoked)."""
    pass


@dataclass(frozen=True)
class AuthenticatedUser:
    """The caller, as established from their access token."""
    id: str
    email: Optional[str] = None
    access_token: str = ""


class TokenVerifier(Protocol):
    """Protocol for resolving an access token to a user."""

    async def get_user(self, access_token: str) -> Optional[AuthenticatedUser]:
        """
        Return the token's user, or None if the token is valid but has no user.

        Raises AuthVerificationError if the token is rejected.
        """
        ...


class SupabaseTokenVerifier:
    """
    Verifies tokens with Supabase Auth.

    The supabase client is synchronous; like the storage client we expose
    an async method so routes don't care which backend they talk to.
    Only rejections from Supabase Auth become AuthVerificationError;
    transport failures propagate to the caller.
    """

    def __init__(self, url: str, anon_key: str, client: Optional[Any] = None) -> None:
        if not url or not anon_key:
            raise AuthNotConfiguredError("Supabase URL and anon key are required")

        if client is None:
            client = create_client(url, anon_key)

        self._client = client

        logger.info("Initialized Supabase token verifier", extra={"supabase_url": url})

    async def get_user(self, access_token: str) -> Optional[AuthenticatedUser]:
        try:
            response = self._client.auth.get_user(access_token)
        except AuthApiError as e:
            logger.warning(
                "Token rejected by Supabase",
                extra={"token_prefix": access_token[:8], "error": str(e)}
            )
            raise AuthVerificationError("Invalid or expired token")

        user = getattr(response, "user", None) if response is not None else None
        if user is None:
            return None

        return AuthenticatedUser(
            id=str(user.id),
            email=getattr(user, "email", None),
            access_token=access_token,
        )


class MockTokenVerifier:
    """
    Accepts tokens from a fixed map.

    Not suitable for production, but perfect for development and testing.
    """

    def __init__(self, tokens: dict[str, tuple[str, Optional[str]]]) -> None:
        self._tokens = dict(tokens)
        logger.info("Initialized mock token verifier", extra={"token_count": len(self._tokens)})

    async def get_user(self, access_token: str) -> Optional[AuthenticatedUser]:
        if access_token not in self._tokens:
            raise AuthVerificationError("Invalid or expired token")

        user_id, email = self._tokens[access_token]
        return AuthenticatedUser(id=user_id, email=email, access_token=access_token)


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_token_verifier(
    supabase_url: str = "",
    supabase_anon_key: str = "",
    mock_mode: bool = False,
    mock_tokens: Optional[dict[str, tuple[str, Optional[str]]]] = None,
) -> TokenVerifier:
    """Return the mock verifier in mock mode, otherwise the Supabase one."""
    if mock_mode:
        return MockTokenVerifier(mock_tokens or {})

    return SupabaseTokenVerifier(supabase_url, supabase_anon_key)
