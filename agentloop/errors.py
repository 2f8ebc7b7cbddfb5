"""
Error taxonomy shared across the agentloop layers.

ProviderError and EmbeddingError abort a run and are surfaced to the
caller, even when the embedding call happens inside a tool handler.
Other tool-level errors are absorbed into the transcript as tool-result
turns carrying an error marker.
"""

from typing import Optional


class AgentLoopError(Exception):
    """Base class for all agentloop errors."""
    pass


class ProviderError(AgentLoopError):
    """Network, auth, rate-limit or protocol failure talking to the completion provider."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class EmbeddingError(AgentLoopError):
    """Failure producing embeddings (provider error or malformed vectors)."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ToolContractError(AgentLoopError):
    """Unknown tool, malformed payload, or arguments violating the declared schema."""
    pass


class ToolExecutionError(AgentLoopError):
    """A tool handler raised while executing validated arguments."""
    pass


class IterationBudgetExceeded(AgentLoopError):
    """The agent loop reached max_iterations without a final answer."""
    pass


class AgentRunError(AgentLoopError):
    """A run ended without an answer for a reason other than budget or provider."""
    pass


class TranscriptError(AgentLoopError):
    """An append would break the transcript's correlation invariant."""
    pass


class MemoryConfigurationError(AgentLoopError):
    """Embedding dimension mismatch between the store and its embedder or data."""
    pass
