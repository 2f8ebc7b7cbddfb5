from types import SimpleNamespace

import pytest
import requests

from agentloop.embedding import OllamaEmbedder, OpenAIEmbedder
from agentloop.errors import EmbeddingError


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


def test_ollama_embeds_in_order(monkeypatch):
    sent = {}

    def fake_post(url, json, timeout):
        sent.update(json)
        return FakeResponse({"embeddings": [[1, 0, 0], [0, 1, 0]]})

    monkeypatch.setattr(requests, "post", fake_post)
    embedder = OllamaEmbedder(dimensions=3)

    vectors = embedder.embed(["a", "b"])

    assert sent["input"] == ["a", "b"]
    assert vectors == [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]]


def test_empty_input_makes_no_call(monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("should not be called")

    monkeypatch.setattr(requests, "post", fail)

    assert OllamaEmbedder(dimensions=3).embed([]) == []


@pytest.mark.parametrize(
    "payload",
    [
        {"embeddings": [[1, 0]]},            # wrong length
        {"embeddings": [[1, 0, 0], [1, 0, 0]]},  # wrong count
        {"unexpected": True},
    ],
)
def test_malformed_vectors_raise(monkeypatch, payload):
    monkeypatch.setattr(requests, "post", lambda *a, **k: FakeResponse(payload))

    with pytest.raises(EmbeddingError):
        OllamaEmbedder(dimensions=3).embed(["only one"])


def test_ollama_http_error(monkeypatch):
    monkeypatch.setattr(requests, "post", lambda *a, **k: FakeResponse({}, status_code=500))

    with pytest.raises(EmbeddingError) as info:
        OllamaEmbedder(dimensions=3).embed_one("x")

    assert info.value.status_code == 500


def test_openai_embedder_requests_dimensions_and_sorts_by_index():
    seen = {}

    def create(**kwargs):
        seen.update(kwargs)
        return SimpleNamespace(data=[
            SimpleNamespace(index=1, embedding=[0.0, 1.0]),
            SimpleNamespace(index=0, embedding=[1.0, 0.0]),
        ])

    client = SimpleNamespace(embeddings=SimpleNamespace(create=create))
    embedder = OpenAIEmbedder(dimensions=2, client=client)

    vectors = embedder.embed(["first", "second"])

    assert seen["dimensions"] == 2
    assert seen["model"] == "text-embedding-3-small"
    assert vectors == [[1.0, 0.0], [0.0, 1.0]]
