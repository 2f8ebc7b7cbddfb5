import json
import logging
import os
from pathlib import Path
from typing import List, Optional, Tuple

from ..models import MemoryRecord

logger = logging.getLogger(__name__)


class MemoryPersistence:
    """
    Handles serialization and deserialization of the vector memory
    record set.

    File layout:
        {"dimensions": 256, "records": [MemoryRecord.to_dict(), ...]}

    Records are stored in insertion order, which is also the tie-break
    order for retrieval.
    """

    @staticmethod
    def save(records: List[MemoryRecord], dimensions: int, path: str) -> None:
        data = {
            "dimensions": dimensions,
            "records": [record.to_dict() for record in records],
        }

        target = Path(path)
        if target.parent and not target.parent.exists():
            target.parent.mkdir(parents=True, exist_ok=True)

        tmp = target.with_name(target.name + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False)

        os.replace(tmp, target)
        logger.debug("[MEMORY] Persisted %d records to %s", len(records), path)

    @staticmethod
    def load(path: str) -> Tuple[Optional[int], List[MemoryRecord]]:
        """Return (dimensions, records). A missing file yields (None, [])."""

        if not os.path.exists(path):
            return None, []

        with open(path, encoding="utf-8") as f:
            data = json.load(f)

        records = [MemoryRecord.from_dict(r) for r in data.get("records", [])]
        logger.info("[MEMORY] Loaded %d records from %s", len(records), path)
        return data.get("dimensions"), records
