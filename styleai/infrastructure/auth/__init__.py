"""
Bearer token verification against Supabase Auth.
"""

from .client import (
    AuthenticatedUser,
    AuthError,
    AuthNotConfiguredError,
    AuthVerificationError,
    MockTokenVerifier,
    SupabaseTokenVerifier,
    TokenVerifier,
    create_token_verifier,
)

__all__ = [
    "AuthenticatedUser",
    "AuthError",
    "AuthNotConfiguredError",
    "AuthVerificationError",
    "MockTokenVerifier",
    "SupabaseTokenVerifier",
    "TokenVerifier",
    "create_token_verifier",
]
