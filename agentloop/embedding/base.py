from abc import ABC, abstractmethod
from typing import List, Sequence

from ..errors import EmbeddingError


class Embedder(ABC):
    """
    Abstract embedding transport.

    Responsible only for:
        • Sending texts to an embedding backend
        • Returning one fixed-length vector per text, in input order

    Implementations hold no per-call state. Failures surface as
    EmbeddingError and are never retried here; retry policy belongs to
    the caller.
    """

    def __init__(self, model: str, dimensions: int) -> None:
        if dimensions <= 0:
            raise ValueError("dimensions must be positive")

        self.model = model
        self._dimensions = dimensions

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def embed(self, texts: Sequence[str]) -> List[List[float]]:
        """
        Embed `texts` and return vectors of length `dimensions`.

        An empty input returns an empty list without calling the backend.
        """
        texts = list(texts)
        if not texts:
            return []

        vectors = self._embed(texts)
        return self._check(vectors, len(texts))

    def embed_one(self, text: str) -> List[float]:
        return self.embed([text])[0]

    @abstractmethod
    def _embed(self, texts: List[str]) -> List[List[float]]:
        """Backend call. Must raise EmbeddingError on transport failure."""
        raise NotImplementedError

    def _check(self, vectors, expected_count: int) -> List[List[float]]:
        if len(vectors) != expected_count:
            raise EmbeddingError(
                f"{self.name} returned {len(vectors)} vectors for {expected_count} inputs"
            )

        checked = []
        for vector in vectors:
            if len(vector) != self._dimensions:
                raise EmbeddingError(
                    f"{self.name} returned a vector of length {len(vector)}, "
                    f"expected {self._dimensions}"
                )
            checked.append([float(v) for v in vector])

        return checked
