from dataclasses import dataclass, field
from typing import Any, Dict, Union
import uuid


@dataclass(frozen=True)
class ToolRequest:
    """
    A model-issued request to invoke a tool.

    This is the *execution intent packet* carried by an assistant turn
    and handed to the ToolDispatcher. It contains no execution logic,
    only declarative intent.

    Architectural Role
    ------------------
    CompletionProvider → ToolRequest → ToolDispatcher → ToolResultTurn

    The `id` correlates the request with the tool-result turn that
    answers it. It is opaque and only unique within one assistant turn.
    """

    tool_name: str
    """Name of the tool to invoke."""

    arguments: Union[str, Dict[str, Any]]
    """
    Raw argument payload as produced by the provider.

    Usually serialized JSON text. Decoding and validation happen at the
    registry boundary, never here.
    """

    # --- System Metadata ---
    id: str = field(default_factory=lambda: f"call_{uuid.uuid4().hex[:24]}")
    """Correlation id answered by exactly one tool-result turn."""

    def __post_init__(self):
        if not self.tool_name or not isinstance(self.tool_name, str):
            raise ValueError("ToolRequest.tool_name must be a non-empty string.")

        if not self.id or not isinstance(self.id, str):
            raise ValueError("ToolRequest.id must be a non-empty string.")

        if isinstance(self.arguments, dict):
            # Freeze a private copy so later caller mutation cannot leak in
            object.__setattr__(self, "arguments", dict(self.arguments))

    # ------------------------------------------------------------------
    # Debug Representation
    # ------------------------------------------------------------------

    def __repr__(self) -> str:
        return f"ToolRequest(id={self.id}, tool='{self.tool_name}')"
