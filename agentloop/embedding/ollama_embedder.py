import logging
from typing import List

import requests

from ..errors import EmbeddingError
from .base import Embedder

logger = logging.getLogger(__name__)


class OllamaEmbedder(Embedder):
    """
    Ollama embeddings transport.
    Local model backend.
    """

    def __init__(
        self,
        model: str = "nomic-embed-text",
        dimensions: int = 768,
        base_url: str = "http://localhost:11434/api/embed",
        timeout_seconds: int = 30,
    ):
        super().__init__(model, dimensions)
        self.url = base_url
        self.timeout = timeout_seconds

    def _embed(self, texts: List[str]) -> List[List[float]]:

        payload = {
            "model": self.model,
            "input": texts,
        }

        logger.debug(f"[EMBEDDING] Ollama | model={self.model} | inputs={len(texts)}")

        try:
            response = requests.post(
                self.url,
                json=payload,
                timeout=self.timeout,
            )

            response.raise_for_status()

        except requests.Timeout as e:
            raise EmbeddingError("Ollama embedding request timed out") from e

        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise EmbeddingError(f"Ollama embedding request failed: {e}", status_code=status) from e

        except requests.RequestException as e:
            raise EmbeddingError(f"Ollama embedding request failed: {e}") from e

        try:
            data = response.json()
            return data["embeddings"]
        except (KeyError, ValueError) as e:
            raise EmbeddingError(f"Unexpected Ollama embedding response format: {e}") from e
