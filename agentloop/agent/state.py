from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Set
import logging

from ..models import RunResult, Transcript

logger = logging.getLogger(__name__)


class LoopState(str, Enum):
    AWAITING_MODEL = "awaiting_model"
    DISPATCHING_TOOLS = "dispatching_tools"
    DONE = "done"
    EXHAUSTED = "exhausted"
    FAILED = "failed"
    CANCELLED = "cancelled"


TERMINAL_STATES = frozenset({
    LoopState.DONE,
    LoopState.EXHAUSTED,
    LoopState.FAILED,
    LoopState.CANCELLED,
})

_ALLOWED = {
    LoopState.AWAITING_MODEL: {
        LoopState.DISPATCHING_TOOLS,
        LoopState.DONE,
        LoopState.EXHAUSTED,
        LoopState.FAILED,
        LoopState.CANCELLED,
    },
    LoopState.DISPATCHING_TOOLS: {
        LoopState.AWAITING_MODEL,
        LoopState.DONE,
        LoopState.FAILED,
    },
}


@dataclass
class AgentRunState:
    """
    Mutable runtime state of one AgentLoop.run invocation.

    This is NOT long-term memory. That belongs to the VectorMemoryStore.
    A run state is owned by exactly one run and never shared.
    """

    transcript: Transcript

    iteration: int = 0
    """
    Completed tool-dispatch rounds.
    """

    provider_calls: int = 0
    """
    Completion requests issued so far.
    """

    state: LoopState = LoopState.AWAITING_MODEL

    succeeded_tools: Set[str] = field(default_factory=set)
    """
    Names of tools that returned a successful result in this run.
    """

    result: Optional[RunResult] = None

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def transition(self, new_state: LoopState) -> None:
        if new_state not in _ALLOWED.get(self.state, ()):
            raise RuntimeError(f"Illegal loop transition {self.state.value} -> {new_state.value}")

        logger.debug(f"[AGENT STATE] {self.state.value} -> {new_state.value}")
        self.state = new_state
