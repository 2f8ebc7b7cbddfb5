import pytest

from agentloop.memory import VectorMemoryStore
from agentloop.models import SystemTurn, Transcript

from tests.helpers import HashingEmbedder, word_count


@pytest.fixture
def embedder():
    return HashingEmbedder()


@pytest.fixture
def store(embedder):
    return VectorMemoryStore(embedder, dimensions=embedder.dimensions, token_counter=word_count)


@pytest.fixture
def seed():
    return Transcript([SystemTurn("You are a helpful assistant.")])
