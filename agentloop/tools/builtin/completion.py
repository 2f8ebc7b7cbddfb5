from typing import Any, Dict, Tuple

from ..registry import ToolHandler
from ..schema import ToolDeclaration


def completion_tool(
    name: str = "isTaskComplete",
    done_field: str = "isComplete",
    answer_field: str = "finalAnswer",
    description: str = (
        "Call this when the task is fully complete. "
        "Pass the final answer for the user."
    ),
) -> Tuple[ToolDeclaration, ToolHandler]:
    """
    Build a "decision" tool the model calls to signal it is done.

    The handler echoes the model's decision back unchanged. Pair it with
    `Sentinel(name, done_field=done_field, payload_field=answer_field)`
    so the agent loop stops on a truthy decision.
    """

    declaration = ToolDeclaration(
        name=name,
        description=description,
        parameters={
            "type": "object",
            "properties": {
                done_field: {
                    "type": "boolean",
                    "description": "Whether the task is complete",
                },
                answer_field: {
                    "type": "string",
                    "description": "The final answer",
                },
            },
        },
        required=frozenset({done_field, answer_field}),
        strict=True,
    )

    def handler(args: Dict[str, Any]) -> Dict[str, Any]:
        return {
            done_field: args[done_field],
            answer_field: args[answer_field],
        }

    return declaration, handler
