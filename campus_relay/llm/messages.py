"""Assembly of the message list sent to every provider."""
from typing import Iterable, List

from campus_relay.llm.types import ProviderMessage
from campus_relay.models.chat import HistoryMessage


def build_provider_messages(
    system_prompt: str,
    history: Iterable[HistoryMessage],
    message: str,
) -> List[ProviderMessage]:
    """
    Build the ordered provider message list for one chat turn.

    The result is always `[system, *history, user]`: exactly one system
    message first, the caller's history untouched and in order, and the
    new user message last.
    """
    messages = [ProviderMessage(role="system", content=system_prompt)]
    messages.extend(
        ProviderMessage(role=item.role, content=item.content) for item in history
    )
    messages.append(ProviderMessage(role="user", content=message))
    return messages
