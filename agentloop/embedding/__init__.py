"""
Embedding transport layer.

Exposes:
- Embedder (abstract interface)
- OpenAIEmbedder (remote backend)
- OllamaEmbedder (local backend)
"""

from .base import Embedder
from .openai_embedder import OpenAIEmbedder
from .ollama_embedder import OllamaEmbedder

__all__ = [
    "Embedder",
    "OpenAIEmbedder",
    "OllamaEmbedder",
]
