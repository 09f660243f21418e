import json
from typing import Any

import httpx
import pytest

from campus_relay.core.config import Settings
from campus_relay.llm.client import (
    ChatCompletionClient,
    ProviderConnectionError,
    build_provider_clients,
)
from campus_relay.llm.types import ProviderFailure, ProviderMessage, ProviderSuccess

ENDPOINT = "https://primary.test/v1/chat/completions"

MESSAGES = [
    ProviderMessage(role="system", content="You are the IARE assistant."),
    ProviderMessage(role="user", content="Hi"),
]


def _client(handler, **kwargs) -> ChatCompletionClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    params = dict(
        name="primary",
        endpoint=ENDPOINT,
        api_key="xai-secret",
        model="grok-2-latest",
        http_client=http,
    )
    params.update(kwargs)
    return ChatCompletionClient(**params)


def _completion(content: Any) -> dict:
    return {
        "id": "cmpl-1",
        "choices": [
            {"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"}
        ],
        "usage": {"prompt_tokens": 10, "completion_tokens": 3, "total_tokens": 13},
    }


@pytest.mark.anyio
async def test_request_shape_and_auth_header() -> None:
    observed: dict[str, Any] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        observed["method"] = request.method
        observed["url"] = str(request.url)
        observed["authorization"] = request.headers.get("Authorization")
        observed["payload"] = json.loads(request.content)
        return httpx.Response(200, json=_completion("Hello"))

    client = _client(handler, max_tokens=1024, temperature=0.7)
    outcome = await client.complete(MESSAGES)

    assert outcome == ProviderSuccess(text="Hello")
    assert observed["method"] == "POST"
    assert observed["url"] == ENDPOINT
    assert observed["authorization"] == "Bearer xai-secret"
    assert observed["payload"] == {
        "model": "grok-2-latest",
        "messages": [
            {"role": "system", "content": "You are the IARE assistant."},
            {"role": "user", "content": "Hi"},
        ],
        "max_tokens": 1024,
        "temperature": 0.7,
    }


@pytest.mark.anyio
async def test_unset_generation_parameters_are_omitted() -> None:
    observed: dict[str, Any] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        observed["payload"] = json.loads(request.content)
        return httpx.Response(200, json=_completion("ok"))

    await _client(handler).complete(MESSAGES)

    assert set(observed["payload"]) == {"model", "messages"}


@pytest.mark.anyio
async def test_text_is_first_choice_content_verbatim() -> None:
    content = "  **Placements**: 90%+\n\n- TCS\n- Infosys  "
    body = _completion(content)
    body["choices"].append({"message": {"role": "assistant", "content": "second"}})

    client = _client(lambda request: httpx.Response(200, json=body))
    outcome = await client.complete(MESSAGES)

    assert outcome.ok
    assert outcome.text == content


@pytest.mark.anyio
@pytest.mark.parametrize("status", [401, 402, 403, 429, 500, 503])
async def test_http_errors_are_outcomes_not_exceptions(status: int) -> None:
    client = _client(lambda request: httpx.Response(status, text='{"error": "invalid_api_key"}'))

    outcome = await client.complete(MESSAGES)

    assert outcome == ProviderFailure(http_status=status, raw_body='{"error": "invalid_api_key"}')
    assert not outcome.ok


@pytest.mark.anyio
@pytest.mark.parametrize(
    "body",
    [
        "not json",
        json.dumps({"choices": []}),
        json.dumps({"choices": [{"message": {}}]}),
        json.dumps({"choices": [{"message": {"content": None}}]}),
        json.dumps({"data": "something else"}),
        json.dumps(_completion("")),
    ],
)
async def test_unexpected_success_body_is_malformed(body: str) -> None:
    client = _client(lambda request: httpx.Response(200, text=body))

    outcome = await client.complete(MESSAGES)

    assert isinstance(outcome, ProviderFailure)
    assert outcome.malformed
    assert outcome.http_status == 200
    assert outcome.raw_body == body


@pytest.mark.anyio
async def test_redirect_is_followed_to_the_completion() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        if request.url.path == "/v1/chat/completions":
            return httpx.Response(307, headers={"Location": "https://primary.test/v2/chat/completions"})
        assert json.loads(request.content)["model"] == "grok-2-latest"
        return httpx.Response(200, json=_completion("Moved but answered"))

    outcome = await _client(handler).complete(MESSAGES)

    assert outcome == ProviderSuccess(text="Moved but answered")
    assert seen == ["/v1/chat/completions", "/v2/chat/completions"]


@pytest.mark.anyio
@pytest.mark.parametrize("status", [204, 302, 304])
async def test_non_error_status_without_completion_is_malformed(status: int) -> None:
    client = _client(lambda request: httpx.Response(status))

    outcome = await client.complete(MESSAGES)

    assert isinstance(outcome, ProviderFailure)
    assert outcome.malformed
    assert outcome.http_status == status


@pytest.mark.anyio
async def test_transport_error_raises_connection_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ProviderConnectionError) as exc_info:
        await _client(handler).complete(MESSAGES)

    assert exc_info.value.provider == "primary"


@pytest.mark.anyio
async def test_timeout_raises_connection_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(ProviderConnectionError):
        await _client(handler, timeout=0.1).complete(MESSAGES)


def test_build_provider_clients_only_includes_configured() -> None:
    http = httpx.AsyncClient()
    assert build_provider_clients(Settings(), http) == []

    clients = build_provider_clients(Settings(secondary_api_key="gw"), http)
    assert [c.name for c in clients] == ["secondary"]
    assert clients[0].model == "google/gemini-3-flash-preview"
    assert clients[0].max_tokens is None

    clients = build_provider_clients(Settings(primary_api_key="xai", secondary_api_key="gw"), http)
    assert [c.name for c in clients] == ["primary", "secondary"]
    assert clients[0].endpoint == "https://api.x.ai/v1/chat/completions"
    assert (clients[0].max_tokens, clients[0].temperature) == (1024, 0.7)
