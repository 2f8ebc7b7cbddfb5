from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class MemoryRecord:
    """
    Immutable unit of long-term memory owned by the VectorMemoryStore.

    Records are created by `save` and never deleted by the core.
    The only permitted change is a newer `updated_at` (see `touched`).
    """

    id: str
    content: str
    embedding: Tuple[float, ...]
    token_count: int
    created_at: datetime
    updated_at: datetime

    def __post_init__(self):
        object.__setattr__(self, "embedding", tuple(float(v) for v in self.embedding))

        if self.token_count < 0:
            raise ValueError("token_count cannot be negative.")

    @property
    def dimensions(self) -> int:
        return len(self.embedding)

    def touched(self, when: datetime = None) -> "MemoryRecord":
        return replace(self, updated_at=when or datetime.now(timezone.utc))

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self, include_embedding: bool = True) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "content": self.content,
            "token_count": self.token_count,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
        if include_embedding:
            data["embedding"] = list(self.embedding)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MemoryRecord":
        return cls(
            id=data["id"],
            content=data["content"],
            embedding=tuple(data["embedding"]),
            token_count=int(data["token_count"]),
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
        )

    def __repr__(self) -> str:
        preview = self.content if len(self.content) <= 40 else self.content[:37] + "..."
        return f"MemoryRecord(id={self.id[:8]}, content={preview!r})"
