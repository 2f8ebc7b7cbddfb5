import json
from types import SimpleNamespace

import httpx
import openai
import pytest
import requests

from agentloop.agent import AgentLoop
from agentloop.errors import ProviderError
from agentloop.models import (
    AssistantTurn,
    RunStatus,
    SystemTurn,
    ToolRequest,
    ToolResultTurn,
    Transcript,
    UserTurn,
)
from agentloop.providers import (
    ChatCompletionsProvider,
    OpenAIProvider,
    to_chat_messages,
    tool_params,
    tool_requests_from_message,
)
from agentloop.tools import ToolDeclaration, ToolDispatcher, ToolRegistry


WEATHER = ToolDeclaration(
    name="getWeather",
    description="Get the weather",
    parameters={"type": "object", "properties": {"location": {"type": "string"}}},
)


def _transcript():
    return Transcript([
        SystemTurn("sys"),
        UserTurn("weather in Dallas?"),
        AssistantTurn(tool_requests=[ToolRequest("getWeather", {"location": "Dallas, TX"}, id="c1")]),
        ToolResultTurn("c1", "getWeather", '{"temperature": "80°F"}'),
    ])


# ------------------------------------------------------------------
# Wire conversion
# ------------------------------------------------------------------

def test_to_chat_messages():
    messages = to_chat_messages(_transcript())

    assert [m["role"] for m in messages] == ["system", "user", "assistant", "tool"]
    tool_call = messages[2]["tool_calls"][0]
    assert tool_call["id"] == "c1"
    assert tool_call["function"]["name"] == "getWeather"
    assert json.loads(tool_call["function"]["arguments"]) == {"location": "Dallas, TX"}
    assert messages[3] == {"role": "tool", "tool_call_id": "c1", "content": '{"temperature": "80°F"}'}


def test_tool_params():
    assert tool_params([], "auto") == {}
    assert tool_params([WEATHER], "none")["tool_choice"] == "none"
    assert tool_params([WEATHER], "getWeather")["tool_choice"] == {
        "type": "function",
        "function": {"name": "getWeather"},
    }


def test_tool_requests_from_message():
    message = {
        "role": "assistant",
        "tool_calls": [
            {"id": "a", "type": "function", "function": {"name": "getWeather", "arguments": '{"location": "x"}'}},
        ],
    }

    (request,) = tool_requests_from_message(message)

    assert request.id == "a"
    assert request.arguments == '{"location": "x"}'
    assert tool_requests_from_message({"role": "assistant", "content": "hi"}) == []


def test_malformed_tool_calls_are_provider_errors():
    with pytest.raises(ProviderError):
        tool_requests_from_message(None)

    with pytest.raises(ProviderError):
        tool_requests_from_message({"tool_calls": [{"id": "a", "function": "t"}]})

    with pytest.raises(ProviderError):
        tool_requests_from_message({"tool_calls": [{"id": "a"}]})

    duplicated = {"id": "a", "function": {"name": "t", "arguments": "{}"}}
    with pytest.raises(ProviderError):
        tool_requests_from_message({"tool_calls": [duplicated, duplicated]})


# ------------------------------------------------------------------
# ChatCompletionsProvider (requests)
# ------------------------------------------------------------------

class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


def test_chat_completions_request_and_parse(monkeypatch):
    sent = {}

    def fake_post(url, headers, json, timeout):
        sent.update(url=url, headers=headers, json=json, timeout=timeout)
        return FakeResponse({
            "model": "llama",
            "choices": [{"message": {
                "role": "assistant",
                "content": None,
                "tool_calls": [{"id": "c9", "type": "function",
                                "function": {"name": "getWeather", "arguments": "{}"}}],
            }}],
            "usage": {"total_tokens": 12},
        })

    monkeypatch.setattr(requests, "post", fake_post)
    provider = ChatCompletionsProvider(api_key="secret", timeout_seconds=5)

    completion = provider.complete(Transcript([SystemTurn("sys")]), [WEATHER], "auto")

    assert sent["headers"]["Authorization"] == "Bearer secret"
    assert sent["timeout"] == 5
    assert sent["json"]["tools"][0]["function"]["name"] == "getWeather"
    assert completion.tool_requests[0].id == "c9"
    assert completion.text is None
    assert completion.usage == {"total_tokens": 12}


def test_chat_completions_http_error(monkeypatch):
    monkeypatch.setattr(requests, "post", lambda *a, **k: FakeResponse({}, status_code=429))
    provider = ChatCompletionsProvider(api_key="secret")

    with pytest.raises(ProviderError) as info:
        provider.complete(Transcript([SystemTurn("sys")]))

    assert info.value.status_code == 429


def test_chat_completions_connection_error(monkeypatch):
    def refuse(*args, **kwargs):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(requests, "post", refuse)

    with pytest.raises(ProviderError):
        ChatCompletionsProvider(api_key="secret").complete(Transcript([SystemTurn("sys")]))


@pytest.mark.parametrize("payload", [
    {"choices": []},
    {"choices": [{"message": None}]},
    {"choices": [{"message": "hello"}]},
    {"choices": [{"message": {"tool_calls": "getWeather"}}]},
    {"choices": [{"message": {"tool_calls": ["getWeather"]}}]},
    {"choices": [{"message": {"tool_calls": [{"id": "a", "function": "getWeather"}]}}]},
])
def test_chat_completions_malformed_body(monkeypatch, payload):
    monkeypatch.setattr(requests, "post", lambda *a, **k: FakeResponse(payload))

    with pytest.raises(ProviderError):
        ChatCompletionsProvider(api_key="secret").complete(Transcript([SystemTurn("sys")]))


def test_malformed_body_fails_run_with_transcript(monkeypatch, seed):
    monkeypatch.setattr(requests, "post", lambda *a, **k: FakeResponse({"choices": [{"message": None}]}))
    loop = AgentLoop(ChatCompletionsProvider(api_key="secret"), ToolDispatcher(ToolRegistry()))

    result = loop.run(seed)

    assert result.status == RunStatus.FAILED
    assert result.error_type == "ProviderError"
    assert len(result.transcript) == 1


def test_chat_completions_requires_api_key(monkeypatch):
    monkeypatch.delenv("GROQ_API_KEY", raising=False)

    with pytest.raises(RuntimeError):
        ChatCompletionsProvider()


# ------------------------------------------------------------------
# OpenAIProvider (SDK)
# ------------------------------------------------------------------

class FakeMessage:
    def __init__(self, data):
        self._data = data

    def model_dump(self, exclude_none=False):
        return {k: v for k, v in self._data.items() if not (exclude_none and v is None)}


class FakeCompletions:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.kwargs = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error is not None:
            raise self.error
        return self.response


def _client(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def test_openai_provider_text_answer():
    completions = FakeCompletions(SimpleNamespace(
        model="gpt-4o-mini",
        usage=None,
        choices=[SimpleNamespace(message=FakeMessage({"role": "assistant", "content": "Hello", "tool_calls": None}))],
    ))
    provider = OpenAIProvider(client=_client(completions))

    completion = provider.complete(Transcript([SystemTurn("sys")]))

    assert completion.text == "Hello"
    assert completion.tool_requests == ()
    assert "tools" not in completions.kwargs
    assert completions.kwargs["model"] == "gpt-4o-mini"


def test_openai_provider_wraps_sdk_errors():
    error = openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))
    provider = OpenAIProvider(client=_client(FakeCompletions(error=error)))

    with pytest.raises(ProviderError):
        provider.complete(Transcript([SystemTurn("sys")]))


def test_unknown_forced_tool_rejected():
    provider = OpenAIProvider(client=_client(FakeCompletions()))

    with pytest.raises(ValueError):
        provider.complete(Transcript([SystemTurn("sys")]), [WEATHER], "getFlights")
