"""
agentloop: bounded tool-calling agent loop with vector memory.
"""

from .errors import (
    AgentLoopError,
    AgentRunError,
    EmbeddingError,
    IterationBudgetExceeded,
    MemoryConfigurationError,
    ProviderError,
    ToolContractError,
    ToolExecutionError,
    TranscriptError,
)
from .models import (
    AssistantTurn,
    MemoryRecord,
    RunResult,
    RunStatus,
    SystemTurn,
    ToolRequest,
    ToolResult,
    ToolResultTurn,
    Transcript,
    UserTurn,
)
from .tools import Capability, ToolDeclaration, ToolDispatcher, ToolRegistry
from .agent import AgentLoop, Conversation, Sentinel
from .memory import VectorMemoryStore
from .config import AgentConfig
from .app import AgentApp

__all__ = [
    "AgentLoopError",
    "AgentRunError",
    "EmbeddingError",
    "IterationBudgetExceeded",
    "MemoryConfigurationError",
    "ProviderError",
    "ToolContractError",
    "ToolExecutionError",
    "TranscriptError",
    "AssistantTurn",
    "MemoryRecord",
    "RunResult",
    "RunStatus",
    "SystemTurn",
    "ToolRequest",
    "ToolResult",
    "ToolResultTurn",
    "Transcript",
    "UserTurn",
    "Capability",
    "ToolDeclaration",
    "ToolDispatcher",
    "ToolRegistry",
    "AgentLoop",
    "Conversation",
    "Sentinel",
    "VectorMemoryStore",
    "AgentConfig",
    "AgentApp",
]
