from .store import VectorMemoryStore
from .persistence import MemoryPersistence
from .similarity import cosine_similarities, rank_by_cosine
from .tokens import count_tokens

__all__ = [
    "VectorMemoryStore",
    "MemoryPersistence",
    "cosine_similarities",
    "rank_by_cosine",
    "count_tokens",
]
