from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from threading import RLock
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from ..embedding import Embedder
from ..errors import MemoryConfigurationError
from ..models import MemoryRecord
from .persistence import MemoryPersistence
from .similarity import rank_by_cosine
from .tokens import count_tokens

logger = logging.getLogger(__name__)


class VectorMemoryStore:
    """
    Long-term semantic memory backed by a flat cosine-similarity index.

    The store owns its MemoryRecords exclusively. Records are appended by
    `save` and never deleted; `touch` only refreshes `updated_at`.

    Concurrency
    -----------
    Writes are serialized by an RLock and publish a new immutable
    snapshot (records tuple + embedding matrix). Reads grab the current
    snapshot reference and never take the lock, so readers never block
    each other.

    The embedding dimension is fixed per store. A mismatch with the
    embedder or with persisted data is a configuration error raised at
    construction.
    """

    def __init__(
        self,
        embedder: Embedder,
        dimensions: int = 256,
        persist_path: Optional[str] = None,
        token_counter: Optional[Callable[[str], int]] = None,
    ) -> None:

        if dimensions <= 0:
            raise MemoryConfigurationError("dimensions must be positive")

        if embedder.dimensions != dimensions:
            raise MemoryConfigurationError(
                f"Embedder produces {embedder.dimensions}-d vectors, "
                f"store expects {dimensions}"
            )

        self._embedder = embedder
        self._dimensions = dimensions
        self._persist_path = persist_path
        self._count_tokens = token_counter or count_tokens
        self._lock = RLock()

        records: List[MemoryRecord] = []
        if persist_path:
            stored_dims, records = MemoryPersistence.load(persist_path)
            if stored_dims is not None and stored_dims != dimensions:
                raise MemoryConfigurationError(
                    f"Persisted memory at {persist_path} has {stored_dims}-d vectors, "
                    f"store expects {dimensions}"
                )
            bad = [r.id for r in records if r.dimensions != dimensions]
            if bad:
                raise MemoryConfigurationError(
                    f"Persisted records with wrong dimension: {bad[:5]}"
                )

        self._publish(records)

        logger.info(
            "[MEMORY] Store ready | dims=%d | records=%d | persist=%s",
            dimensions,
            len(records),
            persist_path,
        )

    # ------------------------------------------------------------------
    # Write Path
    # ------------------------------------------------------------------

    def save(self, content: str) -> MemoryRecord:
        """
        Embed and store `content` as a new record.

        Saving identical content twice creates two distinct records.
        """
        if not isinstance(content, str) or not content.strip():
            raise ValueError("Memory content must be a non-empty string.")

        # Network call happens outside the write lock
        embedding = self._embedder.embed_one(content)
        token_count = self._count_tokens(content)
        now = datetime.now(timezone.utc)

        record = MemoryRecord(
            id=str(uuid.uuid4()),
            content=content,
            embedding=tuple(embedding),
            token_count=token_count,
            created_at=now,
            updated_at=now,
        )

        with self._lock:
            records, _, _ = self._snapshot
            new_records = list(records) + [record]
            self._persist(new_records)
            self._publish(new_records)

        logger.info(
            "[MEMORY] Saved | id=%s | tokens=%d | total=%d",
            record.id,
            token_count,
            len(self),
        )
        return record

    def touch(self, record_id: str) -> MemoryRecord:
        """Refresh `updated_at` of a record. Nothing else changes."""

        with self._lock:
            records, _, index_map = self._snapshot
            index = index_map.get(record_id)
            if index is None:
                raise KeyError(f"Memory '{record_id}' does not exist.")

            updated = records[index].touched()
            new_records = list(records)
            new_records[index] = updated
            self._persist(new_records)
            self._publish(new_records)

        return updated

    # ------------------------------------------------------------------
    # Read Path
    # ------------------------------------------------------------------

    def search(self, query: str, k: int = 10) -> List[Tuple[MemoryRecord, float]]:
        """
        Return up to `k` (record, similarity) pairs, most similar first.

        similarity = 1 - cosine_distance. Ties keep insertion order.
        An empty store returns [] without calling the embedder.
        """
        if k <= 0:
            raise ValueError("k must be positive")

        records, matrix, _ = self._snapshot
        if not records:
            return []

        query_vector = self._embedder.embed_one(query)
        ranked = rank_by_cosine(query_vector, matrix, k)

        logger.debug("[MEMORY] Search | k=%d | candidates=%d", k, len(records))
        return [(records[i], sim) for i, sim in ranked]

    def retrieve(self, query: str, k: int = 10) -> List[MemoryRecord]:
        return [record for record, _ in self.search(query, k)]

    def get(self, record_id: str) -> MemoryRecord:
        records, _, index_map = self._snapshot
        index = index_map.get(record_id)
        if index is None:
            raise KeyError(f"Memory '{record_id}' does not exist.")
        return records[index]

    def records(self) -> List[MemoryRecord]:
        """All records in insertion order."""
        records, _, _ = self._snapshot
        return list(records)

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def embedder(self) -> Embedder:
        return self._embedder

    def __len__(self) -> int:
        return len(self._snapshot[0])

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _publish(self, records: List[MemoryRecord]) -> None:
        if records:
            matrix = np.array([r.embedding for r in records], dtype=np.float64)
        else:
            matrix = np.zeros((0, self._dimensions), dtype=np.float64)
        matrix.setflags(write=False)

        index: Dict[str, int] = {r.id: i for i, r in enumerate(records)}

        # Single attribute swap keeps readers consistent
        self._snapshot = (tuple(records), matrix, index)

    def _persist(self, records: List[MemoryRecord]) -> None:
        # Runs before _publish so a failed write leaves memory unchanged
        if self._persist_path:
            MemoryPersistence.save(records, self._dimensions, self._persist_path)
