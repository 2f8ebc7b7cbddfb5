from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional
import json


@dataclass(frozen=True)
class ToolResult:
    """
    Immutable structured record of a single tool dispatch.

    A ToolResult is what the dispatcher hands back to the agent loop
    for every ToolRequest, whether the handler ran or not. The loop
    never sees a raw exception from a tool; it sees one of these.

    Attributes
    ----------
    request_id : str
        Correlation id of the ToolRequest this result answers.

    tool_name : str
        Name of the tool that was requested.

    status : {"success", "failure", "rejected"}
        Outcome classification:
            success  → handler ran and returned a value
            failure  → handler raised (ToolExecutionError)
            rejected → handler never ran (ToolContractError)

    output : Any
        Handler return value. None unless status is success.

    error : Optional[str]
        Error message when status is failure or rejected.

    error_type : Optional[str]
        Name of the error class ("ToolContractError" / "ToolExecutionError").

    latency_ms : int
        Dispatch time in milliseconds (monotonic).
    """

    request_id: str
    tool_name: str
    status: Literal["success", "failure", "rejected"]
    output: Any
    error: Optional[str]
    error_type: Optional[str]
    latency_ms: int

    # ------------------------------------------------------------------
    # Convenience Properties
    # ------------------------------------------------------------------

    @property
    def is_success(self) -> bool:
        return self.status == "success"

    @property
    def is_failure(self) -> bool:
        return self.status == "failure"

    @property
    def is_rejected(self) -> bool:
        return self.status == "rejected"

    # ------------------------------------------------------------------
    # Transcript Rendering
    # ------------------------------------------------------------------

    def to_content(self) -> str:
        """
        Render the text placed in the tool-result turn.

        Successful outputs are serialized as JSON (strings are passed
        through untouched). Errors are rendered as an error marker object
        so the model can react to them on its next turn.
        """
        if not self.is_success:
            return json.dumps(
                {"error": self.error, "error_type": self.error_type},
                ensure_ascii=False,
            )

        if isinstance(self.output, str):
            return self.output

        return json.dumps(self.output, ensure_ascii=False, default=str)

    # ------------------------------------------------------------------
    # Safe Serialization Boundary
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to JSON-safe dictionary.

        This method should be used when returning results
        outside the agent boundary (e.g., FastAPI layer).
        """

        return {
            "request_id": self.request_id,
            "tool_name": self.tool_name,
            "status": self.status,
            "output": self.output,
            "error": self.error,
            "error_type": self.error_type,
            "latency_ms": self.latency_ms,
        }
