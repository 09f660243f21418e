"""
LLM module - Provider integration.

This module handles all provider interactions:
- System prompt (prompts/)
- Message assembly
- Chat-completion HTTP client and response decoding
"""
from campus_relay.llm.client import (
    ChatCompletionClient,
    ProviderConnectionError,
    build_provider_clients,
)
from campus_relay.llm.messages import build_provider_messages
from campus_relay.llm.types import (
    ProviderFailure,
    ProviderMessage,
    ProviderOutcome,
    ProviderSuccess,
)

__all__ = [
    "ChatCompletionClient",
    "ProviderConnectionError",
    "build_provider_clients",
    "build_provider_messages",
    "ProviderFailure",
    "ProviderMessage",
    "ProviderOutcome",
    "ProviderSuccess",
]
