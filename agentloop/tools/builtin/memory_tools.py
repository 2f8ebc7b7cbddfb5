from __future__ import annotations

import logging
from typing import Any, Dict, Tuple

from pydantic import BaseModel, Field

from ..registry import ToolHandler, ToolRegistry
from ..schema import Capability, ToolDeclaration

logger = logging.getLogger(__name__)


class SaveMemoryArgs(BaseModel):
    content: str = Field(
        min_length=1,
        description="The content to save to your long term memory.",
    )


class GetMemoryArgs(BaseModel):
    query: str = Field(
        min_length=1,
        description="The query to search your long term memory.",
    )


SAVE_MEMORY_TOOL = ToolDeclaration(
    name="saveMemory",
    description="Use this function to save a memory to your long term memory.",
    args_model=SaveMemoryArgs,
    capability=Capability.MEMORY_WRITE,
)

GET_MEMORY_TOOL = ToolDeclaration(
    name="getMemory",
    description="Use this function to get a memory from your long term memory.",
    args_model=GetMemoryArgs,
    capability=Capability.MEMORY_READ,
)


def memory_tool_handlers(store, limit: int = 10) -> Tuple[ToolHandler, ToolHandler]:
    """Build (saveMemory, getMemory) handlers bound to `store`."""

    if limit <= 0:
        raise ValueError("limit must be positive")

    def save_memory(args: Dict[str, Any]) -> Dict[str, Any]:
        record = store.save(args["content"])
        logger.info("[MEMORY TOOL] Saved memory | id=%s", record.id)
        return {
            "message": "Memory saved successfully.",
            "id": record.id,
        }

    def get_memory(args: Dict[str, Any]) -> Dict[str, Any]:
        hits = store.search(args["query"], k=limit)
        logger.info("[MEMORY TOOL] Retrieved %d memories", len(hits))
        return {
            "memories": "\n".join(record.content for record, _ in hits),
            "hits": [
                {
                    "id": record.id,
                    "content": record.content,
                    "similarity": round(similarity, 6),
                }
                for record, similarity in hits
            ],
        }

    return save_memory, get_memory


def register_memory_tools(registry: ToolRegistry, store, limit: int = 10) -> None:
    """Register saveMemory / getMemory against a VectorMemoryStore."""

    save_memory, get_memory = memory_tool_handlers(store, limit=limit)

    registry.register_many([
        (SAVE_MEMORY_TOOL, save_memory),
        (GET_MEMORY_TOOL, get_memory),
    ])
