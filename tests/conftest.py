"""Shared fixtures and fakes: scripted providers and an in-memory identity verifier."""
from typing import List, Optional, Sequence, Union

import pytest

from campus_relay.auth.verifier import Identity, IdentityVerificationError
from campus_relay.llm.client import ProviderConnectionError
from campus_relay.llm.types import ProviderFailure, ProviderMessage, ProviderSuccess
from campus_relay.services.relay_service import (
    PRIMARY_POLICY,
    SECONDARY_POLICY,
    ProviderAttempt,
    RelayHandler,
)

VALID_TOKEN = "valid-token"


@pytest.fixture
def anyio_backend():
    return "asyncio"


class FakeVerifier:
    def __init__(self, valid_token: str = VALID_TOKEN):
        self.valid_token = valid_token
        self.calls: List[str] = []

    async def verify(self, token: str) -> Identity:
        self.calls.append(token)
        if token != self.valid_token:
            raise IdentityVerificationError("token rejected (401)")
        return Identity(user_id="user-1", email="student@iare.ac.in")


Scripted = Union[ProviderSuccess, ProviderFailure, Exception]


class FakeProvider:
    """Provider client that returns a scripted outcome and records calls."""

    def __init__(self, name: str, outcome: Scripted):
        self.name = name
        self.outcome = outcome
        self.calls: List[List[ProviderMessage]] = []

    async def complete(self, messages: Sequence[ProviderMessage]):
        self.calls.append(list(messages))
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


def ok(text: str) -> ProviderSuccess:
    return ProviderSuccess(text=text)


def fail(status: int, body: str = "") -> ProviderFailure:
    return ProviderFailure(http_status=status, raw_body=body)


def unreachable(name: str) -> ProviderConnectionError:
    return ProviderConnectionError(name, "connection refused")


def make_handler(
    primary: Optional[FakeProvider] = None,
    secondary: Optional[FakeProvider] = None,
    verifier: Optional[FakeVerifier] = None,
) -> RelayHandler:
    attempts = []
    if primary is not None:
        attempts.append(ProviderAttempt(primary.name, primary, PRIMARY_POLICY))
    if secondary is not None:
        attempts.append(ProviderAttempt(secondary.name, secondary, SECONDARY_POLICY))
    return RelayHandler(attempts, verifier or FakeVerifier(), system_prompt="You are the IARE assistant.")
