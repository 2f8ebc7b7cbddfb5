from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from ..errors import AgentRunError, EmbeddingError, IterationBudgetExceeded, ProviderError
from .turns import Transcript


class RunStatus(str, Enum):
    """Terminal outcome of one agent loop run."""

    DONE = "done"
    EXHAUSTED = "exhausted"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class RunResult:
    """
    Final result of AgentLoop.run.

    Every outcome carries the transcript accumulated so far, including
    failed and cancelled runs.

    Attributes
    ----------
    status : RunStatus
        DONE for a plain-text answer or an accepted sentinel call.

    text : Optional[str]
        Final assistant text (DONE without sentinel), else None.

    payload : Any
        Sentinel payload when the run ended through the decision tool.

    transcript : Transcript
        Full transcript at termination.

    iterations : int
        Completed tool-dispatch rounds.

    provider_calls : int
        Number of completion requests issued (never above max_iterations).

    error : Optional[str]
        Failure description for FAILED / EXHAUSTED / CANCELLED.

    error_type : Optional[str]
        Name of the exception that failed the run (ProviderError or
        EmbeddingError).
    """

    status: RunStatus
    transcript: Transcript
    iterations: int
    provider_calls: int
    text: Optional[str] = None
    payload: Any = None
    error: Optional[str] = None
    error_type: Optional[str] = None

    @property
    def is_done(self) -> bool:
        return self.status == RunStatus.DONE

    @property
    def completed_by_sentinel(self) -> bool:
        return self.is_done and self.text is None

    @property
    def answer(self) -> Any:
        """Text answer, or sentinel payload when the run ended through the decision tool."""
        return self.text if self.text is not None else self.payload

    def raise_for_status(self) -> "RunResult":
        """Raise the matching error for non-DONE outcomes, else return self."""
        if self.status == RunStatus.EXHAUSTED:
            raise IterationBudgetExceeded(self.error or "Iteration budget exhausted")
        if self.status == RunStatus.FAILED and self.error_type == "EmbeddingError":
            raise EmbeddingError(self.error or "Embedding failure")
        if self.status == RunStatus.FAILED:
            raise ProviderError(self.error or "Provider failure")
        if self.status == RunStatus.CANCELLED:
            raise AgentRunError(self.error or "Run cancelled")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "text": self.text,
            "payload": self.payload,
            "iterations": self.iterations,
            "provider_calls": self.provider_calls,
            "transcript_length": len(self.transcript),
            "error": self.error,
            "error_type": self.error_type,
        }
