"""
Wire conversion between Transcript turns and chat-completions messages.

Shared by every OpenAI-compatible provider.
"""

import json
from typing import Any, Dict, List, Mapping, Sequence

from ..errors import ProviderError
from ..models import (
    AssistantTurn,
    SystemTurn,
    ToolRequest,
    ToolResultTurn,
    Transcript,
    UserTurn,
)
from ..tools.schema import ToolDeclaration


def to_chat_messages(transcript: Transcript) -> List[Dict[str, Any]]:
    messages: List[Dict[str, Any]] = []

    for turn in transcript:
        if isinstance(turn, (SystemTurn, UserTurn)):
            messages.append({"role": turn.role, "content": turn.content})

        elif isinstance(turn, AssistantTurn):
            message: Dict[str, Any] = {"role": "assistant", "content": turn.content}
            if turn.tool_requests:
                message["tool_calls"] = [_tool_call(r) for r in turn.tool_requests]
            messages.append(message)

        elif isinstance(turn, ToolResultTurn):
            messages.append({
                "role": "tool",
                "tool_call_id": turn.request_id,
                "content": turn.content,
            })

    return messages


def _tool_call(request: ToolRequest) -> Dict[str, Any]:
    arguments = request.arguments
    if not isinstance(arguments, str):
        arguments = json.dumps(arguments, ensure_ascii=False)

    return {
        "id": request.id,
        "type": "function",
        "function": {"name": request.tool_name, "arguments": arguments},
    }


def tool_params(tools: Sequence[ToolDeclaration], tool_choice: str) -> Dict[str, Any]:
    """Request fields for tools. Omitted entirely for plain chat."""

    if not tools:
        return {}

    if tool_choice in ("auto", "none"):
        choice: Any = tool_choice
    else:
        choice = {"type": "function", "function": {"name": tool_choice}}

    return {
        "tools": [t.to_provider_schema() for t in tools],
        "tool_choice": choice,
    }


def tool_requests_from_message(message: Mapping[str, Any]) -> List[ToolRequest]:
    """
    Extract ToolRequests from a chat-completions assistant message.

    Argument text is kept raw; decoding happens at the registry boundary.
    """
    if not isinstance(message, Mapping):
        raise ProviderError(f"Malformed assistant message in provider response: {message!r}")

    tool_calls = message.get("tool_calls") or []
    if not isinstance(tool_calls, list):
        raise ProviderError(f"Malformed tool_calls in provider response: {tool_calls!r}")

    requests = []

    for call in tool_calls:
        try:
            function = call["function"]
            requests.append(
                ToolRequest(
                    id=call["id"],
                    tool_name=function["name"],
                    arguments=function.get("arguments") or "",
                )
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ProviderError(f"Malformed tool call in provider response: {call!r}") from e

    ids = [r.id for r in requests]
    if len(ids) != len(set(ids)):
        raise ProviderError(f"Duplicate tool call ids in provider response: {ids}")

    return requests
