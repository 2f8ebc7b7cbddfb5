import pytest
from fastapi.testclient import TestClient

from agentloop.agent import AgentLoop, Conversation
from agentloop.errors import ProviderError
from agentloop.server import create_app
from agentloop.tools import ToolDispatcher, ToolRegistry
from agentloop.tools.builtin import register_memory_tools

from tests.helpers import ScriptedProvider, text


@pytest.fixture
def provider():
    return ScriptedProvider([text("Hello there!"), ProviderError("upstream down")])


@pytest.fixture
def client(store, provider):
    registry = ToolRegistry()
    register_memory_tools(registry, store)
    loop = AgentLoop(provider, ToolDispatcher(registry))
    conversation = Conversation(loop, "You are helpful.")
    return TestClient(create_app(conversation, store))


def test_health(client):
    body = client.get("/health").json()

    assert body["status"] == "ok"
    assert body["provider"] == "ScriptedProvider"
    assert body["tools"] == ["saveMemory", "getMemory"]
    assert body["memories"] == 0


def test_chat_and_failed_chat(client):
    ok = client.post("/chat", json={"message": "hi"})
    assert ok.status_code == 200
    assert ok.json()["status"] == "done"
    assert ok.json()["text"] == "Hello there!"

    failed = client.post("/chat", json={"message": "again"})
    assert failed.status_code == 200
    assert failed.json()["status"] == "failed"
    assert "upstream down" in failed.json()["error"]


def test_chat_validates_body(client):
    assert client.post("/chat", json={"message": ""}).status_code == 422


def test_save_and_search_memories(client):
    created = client.post("/memories", json={"content": "Mars has two moons"})
    assert created.status_code == 201
    assert "embedding" not in created.json()

    client.post("/memories", json={"content": "Venus is hot"})

    found = client.get("/memories/search", params={"q": "moons of Mars", "k": 1}).json()

    assert found["query"] == "moons of Mars"
    assert len(found["hits"]) == 1
    assert found["hits"][0]["id"] == created.json()["id"]


def test_embedding_failure_is_bad_gateway(client, embedder):
    embedder.fail = True

    assert client.post("/memories", json={"content": "x"}).status_code == 502


def test_reset(client):
    client.post("/chat", json={"message": "hi"})

    assert client.post("/reset").json() == {"status": "reset"}
