"""
Services module - Relay orchestration.

No HTTP concerns here (those belong in api/); the relay handler takes
the raw Authorization header and body and returns a result or raises a
classified RelayError.
"""
from campus_relay.services.relay_service import (
    DEFAULT_POLICIES,
    PRIMARY_POLICY,
    SECONDARY_POLICY,
    FailurePolicy,
    ProviderAttempt,
    RelayHandler,
    RelaySuccess,
    build_relay_handler,
)

__all__ = [
    "DEFAULT_POLICIES",
    "PRIMARY_POLICY",
    "SECONDARY_POLICY",
    "FailurePolicy",
    "ProviderAttempt",
    "RelayHandler",
    "RelaySuccess",
    "build_relay_handler",
]
