import pytest

from campus_relay.llm.messages import build_provider_messages
from campus_relay.llm.prompts import get_campus_system_prompt
from campus_relay.models.chat import HistoryMessage


def _history(n: int):
    return [
        HistoryMessage(role="user" if i % 2 == 0 else "assistant", content=f"turn {i}")
        for i in range(n)
    ]


@pytest.mark.parametrize("n", [0, 1, 2, 10, 25])
def test_system_first_user_last_history_in_between(n: int) -> None:
    history = _history(n)

    messages = build_provider_messages("SYSTEM", history, "new question")

    assert len(messages) == n + 2
    assert (messages[0].role, messages[0].content) == ("system", "SYSTEM")
    assert (messages[-1].role, messages[-1].content) == ("user", "new question")
    assert [(m.role, m.content) for m in messages[1:-1]] == [(h.role, h.content) for h in history]
    assert sum(1 for m in messages if m.role == "system") == 1


def test_assembly_is_repeatable() -> None:
    history = _history(3)

    first = build_provider_messages("SYSTEM", history, "q")
    second = build_provider_messages("SYSTEM", history, "q")

    assert first == second


def test_campus_prompt_scopes_the_assistant() -> None:
    prompt = get_campus_system_prompt()

    assert prompt.startswith("You are a friendly and helpful AI Assistant")
    assert "Institute of Aeronautical Engineering" in prompt
    assert "Answer ONLY IARE-related queries" in prompt
    assert prompt == prompt.strip()
