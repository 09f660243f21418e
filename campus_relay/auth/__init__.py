"""
Auth module - Caller identity verification.
"""
from campus_relay.auth.verifier import (
    Identity,
    IdentityVerificationError,
    IdentityVerifier,
    SupabaseIdentityVerifier,
    extract_bearer_token,
)

__all__ = [
    "Identity",
    "IdentityVerificationError",
    "IdentityVerifier",
    "SupabaseIdentityVerifier",
    "extract_bearer_token",
]
