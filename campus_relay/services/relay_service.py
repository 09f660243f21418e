"""
Relay Service - One chat turn with provider failover.

This service orchestrates the relay flow:
1. Refuses to run when no provider credential is configured
2. Authenticates the caller's bearer token
3. Parses the chat turn and assembles the provider message list
4. Walks the provider attempt chain until one succeeds or a failure
   is terminal
5. Returns RelaySuccess, or raises a RelayError subclass that the API
   layer maps to an HTTP response

The attempt chain is data: each ProviderAttempt pairs a client with a
FailurePolicy saying which upstream statuses cascade to the next attempt,
which end the request with a specific error, and how any other failure
is reported.
"""
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Protocol, Sequence, Type

import httpx
from pydantic import ValidationError

from campus_relay.auth.verifier import (
    IdentityVerificationError,
    IdentityVerifier,
    SupabaseIdentityVerifier,
    extract_bearer_token,
)
from campus_relay.core.config import Settings
from campus_relay.core.exceptions import (
    AllProvidersFailedError,
    BadRequestError,
    CreditsExhaustedError,
    RateLimitedError,
    RelayError,
    ServiceNotConfiguredError,
    UnauthorizedError,
    UpstreamHardFailureError,
)
from campus_relay.core.logging_config import get_logger
from campus_relay.llm.client import ProviderConnectionError, build_provider_clients
from campus_relay.llm.messages import build_provider_messages
from campus_relay.llm.prompts import get_campus_system_prompt
from campus_relay.llm.types import ProviderFailure, ProviderMessage, ProviderOutcome
from campus_relay.models.chat import ChatRequest

logger = get_logger(__name__)

MALFORMED_STATUS = 502


class ProviderClient(Protocol):
    name: str

    async def complete(self, messages: Sequence[ProviderMessage]) -> ProviderOutcome:
        ...


@dataclass(frozen=True)
class FailurePolicy:
    """
    How one attempt's upstream failures are classified.

    Attributes:
        retryable_statuses: Statuses that move on to the next attempt
        terminal_errors: Statuses that end the request with a specific error
        hard_failure_status: HTTP status for any other failure;
            None echoes the upstream status
        hard_failure_message: User-facing message for hard failures
    """
    retryable_statuses: FrozenSet[int] = frozenset()
    terminal_errors: Dict[int, Type[RelayError]] = field(default_factory=dict)
    hard_failure_status: Optional[int] = None
    hard_failure_message: str = UpstreamHardFailureError.default_message

    def classify(self, provider: str, failure: ProviderFailure) -> Optional[RelayError]:
        """Return the error that ends the request, or None to try the next attempt."""
        if failure.malformed:
            return UpstreamHardFailureError(
                MALFORMED_STATUS,
                message="AI provider returned an unexpected response.",
                details=failure.raw_body,
                upstream_status=failure.http_status,
                provider=provider,
            )

        status = failure.http_status
        if status in self.terminal_errors:
            return self.terminal_errors[status]()
        if status in self.retryable_statuses:
            return None

        return UpstreamHardFailureError(
            self.hard_failure_status or status,
            message=self.hard_failure_message,
            details=failure.raw_body,
            upstream_status=status,
            provider=provider,
        )


PRIMARY_POLICY = FailurePolicy(
    # 403 is how the primary reports an account without credits
    retryable_statuses=frozenset({403, 429, 500, 502, 503}),
    hard_failure_message="AI provider error. Please check the primary provider API key.",
)

SECONDARY_POLICY = FailurePolicy(
    terminal_errors={429: RateLimitedError, 402: CreditsExhaustedError},
    hard_failure_status=500,
    hard_failure_message="AI service error. Please try again.",
)

DEFAULT_POLICIES = {
    "primary": PRIMARY_POLICY,
    "secondary": SECONDARY_POLICY,
}


@dataclass(frozen=True)
class ProviderAttempt:
    name: str
    client: ProviderClient
    policy: FailurePolicy


@dataclass(frozen=True)
class RelaySuccess:
    text: str
    provider: str


class RelayHandler:
    """
    Stateless chat-turn handler.

    Safe to share across concurrent requests: all per-request state lives
    in local variables of `handle`.

    Example:
        >>> handler = RelayHandler(attempts, verifier)
        >>> result = await handler.handle("Bearer eyJ...", b'{"message": "Hi"}')
        >>> result.provider
        'primary'
    """

    def __init__(
        self,
        attempts: Sequence[ProviderAttempt],
        verifier: IdentityVerifier,
        system_prompt: Optional[str] = None,
    ):
        self.attempts: List[ProviderAttempt] = list(attempts)
        self.verifier = verifier
        self.system_prompt = system_prompt or get_campus_system_prompt()

    @property
    def provider_names(self) -> List[str]:
        return [attempt.name for attempt in self.attempts]

    async def handle(self, authorization: Optional[str], body: bytes) -> RelaySuccess:
        """
        Process one chat turn.

        Args:
            authorization: Raw Authorization header value, if any
            body: Raw request body

        Returns:
            RelaySuccess with the reply text and provider name

        Raises:
            RelayError: One subclass per non-success outcome
        """
        # Deployment defects are reported before the caller is authenticated
        if not self.attempts:
            logger.error("No AI provider keys configured")
            raise ServiceNotConfiguredError()

        identity = await self._authenticate(authorization)
        turn = self._parse_turn(body)

        messages = build_provider_messages(
            self.system_prompt, turn.conversation_history, turn.message
        )
        logger.info(
            f"Relaying chat turn: user={identity.user_id}, "
            f"history={len(turn.conversation_history)}, message_length={len(turn.message)}"
        )

        return await self.relay(messages)

    async def relay(self, messages: Sequence[ProviderMessage]) -> RelaySuccess:
        """Walk the attempt chain for an already assembled message list."""
        for attempt in self.attempts:
            try:
                outcome = await attempt.client.complete(messages)
            except ProviderConnectionError as e:
                logger.warning(f"{attempt.name} failed before responding ({e.reason}), fallback=True")
                continue

            if outcome.ok:
                logger.info(f"Response generated successfully via {attempt.name}")
                return RelaySuccess(text=outcome.text, provider=attempt.name)

            error = attempt.policy.classify(attempt.name, outcome)
            logger.info(
                f"{attempt.name} failed with status {outcome.http_status}, "
                f"fallback={error is None}"
            )
            if error is not None:
                raise error

        logger.error(f"No AI provider could fulfill the request (tried: {', '.join(self.provider_names)})")
        raise AllProvidersFailedError()

    async def _authenticate(self, authorization: Optional[str]):
        token = extract_bearer_token(authorization)
        if token is None:
            raise UnauthorizedError()

        try:
            return await self.verifier.verify(token)
        except IdentityVerificationError as e:
            logger.info(f"Rejected caller: {e}")
            raise UnauthorizedError() from e

    def _parse_turn(self, body: bytes) -> ChatRequest:
        try:
            return ChatRequest.model_validate_json(body or b"")
        except ValidationError as e:
            history_fields = ("conversationHistory", "conversation_history")
            if any(err["loc"] and err["loc"][0] in history_fields for err in e.errors()):
                raise BadRequestError(
                    "conversationHistory must be a list of {role, content} objects "
                    "with role 'user' or 'assistant'"
                ) from e
            raise BadRequestError() from e


def build_relay_handler(settings: Settings, http_client: httpx.AsyncClient) -> RelayHandler:
    """Wire the provider clients and identity verifier described by settings."""
    attempts = [
        ProviderAttempt(name=client.name, client=client, policy=DEFAULT_POLICIES[client.name])
        for client in build_provider_clients(settings, http_client)
    ]
    verifier = SupabaseIdentityVerifier(
        settings.supabase_url,
        settings.supabase_anon_key,
        http_client,
        timeout=settings.auth_timeout_seconds,
    )
    logger.info(f"Relay handler ready: providers={[a.name for a in attempts] or 'none'}")
    return RelayHandler(attempts, verifier)
