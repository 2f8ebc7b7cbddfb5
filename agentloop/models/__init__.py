"""
Core runtime data models for the agentloop framework.

These dataclasses define the structured information packets that move
between major system layers (Provider, Agent Loop, Dispatcher, Memory).
"""

from .tool_request import ToolRequest
from .tool_result import ToolResult
from .turns import (
    AssistantTurn,
    ConversationTurn,
    SystemTurn,
    ToolResultTurn,
    Transcript,
    UserTurn,
)
from .memory_record import MemoryRecord
from .run_result import RunResult, RunStatus

__all__ = [
    "ToolRequest",
    "ToolResult",
    "AssistantTurn",
    "ConversationTurn",
    "SystemTurn",
    "ToolResultTurn",
    "Transcript",
    "UserTurn",
    "MemoryRecord",
    "RunResult",
    "RunStatus",
]
