from .state import AgentRunState, LoopState
from .loop import AgentLoop, Sentinel
from .conversation import Conversation

__all__ = [
    "AgentRunState",
    "LoopState",
    "AgentLoop",
    "Sentinel",
    "Conversation",
]
