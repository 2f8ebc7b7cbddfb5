import logging
from typing import List, Optional

import openai
from openai import OpenAI

from ..errors import EmbeddingError
from .base import Embedder

logger = logging.getLogger(__name__)


class OpenAIEmbedder(Embedder):
    """
    OpenAI embeddings backend.

    Uses the `dimensions` request parameter so the vectors come back
    already truncated to the deployment's fixed size.
    """

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        dimensions: int = 256,
        client: Optional[OpenAI] = None,
    ):
        super().__init__(model, dimensions)
        self.client = client or OpenAI()

    def _embed(self, texts: List[str]) -> List[List[float]]:

        logger.debug(f"[EMBEDDING] OpenAI | model={self.model} | inputs={len(texts)}")

        try:
            response = self.client.embeddings.create(
                model=self.model,
                dimensions=self.dimensions,
                input=texts,
            )
        except openai.APIStatusError as e:
            raise EmbeddingError(f"OpenAI embedding request failed: {e}", status_code=e.status_code) from e
        except openai.OpenAIError as e:
            raise EmbeddingError(f"OpenAI embedding request failed: {e}") from e

        data = sorted(response.data, key=lambda item: item.index)
        return [item.embedding for item in data]
