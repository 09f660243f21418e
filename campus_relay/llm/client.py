"""
Chat-completion client for OpenAI-compatible provider endpoints.

One class serves both providers the relay talks to (xAI Grok as primary,
the campus assistant gateway as fallback); they differ only in endpoint,
credential, model, and generation parameters.

A call has exactly three results:
- ProviderSuccess: 2xx with a non-empty first-choice content
- ProviderFailure: any 4xx/5xx, or any other response that does not
  decode to a completion (redirects are followed first)
- ProviderConnectionError raised: the request never got an answer
  (DNS, refused connection, timeout)
"""
from typing import Any, Dict, List, Optional, Sequence

import httpx
from pydantic import ValidationError

from campus_relay.core.logging_config import get_logger
from campus_relay.llm.types import (
    CompletionResponse,
    ProviderFailure,
    ProviderMessage,
    ProviderOutcome,
    ProviderSuccess,
)

logger = get_logger(__name__)


class ChatCompletionClient:
    """
    Stateless adapter to one remote chat-completion endpoint.

    The httpx.AsyncClient is shared and owned by the caller; this class
    never opens or closes it.

    Example:
        >>> async with httpx.AsyncClient() as http:
        ...     client = ChatCompletionClient(
        ...         name="primary",
        ...         endpoint="https://api.x.ai/v1/chat/completions",
        ...         api_key="xai-...",
        ...         model="grok-2-latest",
        ...         http_client=http,
        ...         max_tokens=1024,
        ...         temperature=0.7,
        ...     )
        ...     outcome = await client.complete(messages)
    """

    def __init__(
        self,
        name: str,
        endpoint: str,
        api_key: str,
        model: str,
        http_client: httpx.AsyncClient,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        timeout: Optional[float] = None,
    ):
        self.name = name
        self.endpoint = endpoint
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout
        self._api_key = api_key
        self._http = http_client

    def build_payload(self, messages: Sequence[ProviderMessage]) -> Dict[str, Any]:
        """Request body: model, ordered messages, and any fixed generation parameters."""
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [m.to_payload() for m in messages],
        }
        if self.max_tokens is not None:
            payload["max_tokens"] = self.max_tokens
        if self.temperature is not None:
            payload["temperature"] = self.temperature
        return payload

    async def complete(self, messages: Sequence[ProviderMessage]) -> ProviderOutcome:
        """
        Perform one chat-completion request.

        Args:
            messages: Ordered provider messages, system prompt first

        Returns:
            ProviderSuccess or ProviderFailure

        Raises:
            ProviderConnectionError: If no HTTP response was received
        """
        logger.info(f"Calling {self.name} provider (model={self.model}, messages={len(messages)})")

        request_kwargs: Dict[str, Any] = {
            "json": self.build_payload(messages),
            "follow_redirects": True,
            "headers": {
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
            },
        }
        if self.timeout is not None:
            request_kwargs["timeout"] = self.timeout

        try:
            response = await self._http.post(self.endpoint, **request_kwargs)
        except httpx.RequestError as e:
            logger.warning(f"{self.name} provider unreachable: {type(e).__name__}: {e}")
            raise ProviderConnectionError(self.name, str(e) or type(e).__name__) from e

        body = response.text
        logger.info(f"{self.name} provider response status: {response.status_code}")

        if response.status_code < 400 and not response.is_success:
            # An unfollowable redirect is not an answer from the provider
            logger.error(f"{self.name} provider returned status {response.status_code} without a completion")
            return ProviderFailure(http_status=response.status_code, raw_body=body, malformed=True)

        if not response.is_success:
            logger.error(f"{self.name} provider error: {response.status_code} {body[:500]}")
            return ProviderFailure(http_status=response.status_code, raw_body=body)

        return self._decode(response.status_code, body)

    def _decode(self, status: int, body: str) -> ProviderOutcome:
        """Read the first choice's content; anything else fails closed."""
        try:
            parsed = CompletionResponse.model_validate_json(body)
        except ValidationError as e:
            logger.error(
                f"{self.name} provider returned an unexpected body: "
                f"{e.error_count()} schema error(s)"
            )
            return ProviderFailure(http_status=status, raw_body=body, malformed=True)

        text = parsed.first_content
        if not text:
            logger.error(f"{self.name} provider returned an empty completion")
            return ProviderFailure(http_status=status, raw_body=body, malformed=True)

        return ProviderSuccess(text=text)


class ProviderConnectionError(Exception):
    """
    Raised when a provider request fails before any HTTP response.

    The relay treats this like a retryable upstream failure.
    """

    def __init__(self, provider: str, reason: str):
        super().__init__(f"{provider} provider unreachable: {reason}")
        self.provider = provider
        self.reason = reason


def build_provider_clients(settings, http_client: httpx.AsyncClient) -> List[ChatCompletionClient]:
    """
    Create a client for each provider that has a credential.

    Order is attempt order: primary first, then secondary.
    """
    clients = []
    if settings.primary_api_key:
        clients.append(ChatCompletionClient(
            name="primary",
            endpoint=settings.primary_api_url,
            api_key=settings.primary_api_key,
            model=settings.primary_model,
            http_client=http_client,
            max_tokens=settings.primary_max_tokens,
            temperature=settings.primary_temperature,
            timeout=settings.provider_timeout_seconds,
        ))
    if settings.secondary_api_key:
        clients.append(ChatCompletionClient(
            name="secondary",
            endpoint=settings.secondary_api_url,
            api_key=settings.secondary_api_key,
            model=settings.secondary_model,
            http_client=http_client,
            max_tokens=settings.secondary_max_tokens,
            temperature=settings.secondary_temperature,
            timeout=settings.provider_timeout_seconds,
        ))
    return clients
