from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..models import ToolRequest, Transcript
from ..tools.schema import ToolDeclaration


@dataclass(frozen=True)
class Completion:
    """
    One provider response.

    Either `text`, `tool_requests`, or both. An empty `tool_requests`
    tuple means the model answered in plain text.
    """

    text: Optional[str] = None
    tool_requests: Tuple[ToolRequest, ...] = ()
    model: Optional[str] = None
    usage: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "tool_requests", tuple(self.tool_requests))

    @property
    def has_tool_requests(self) -> bool:
        return bool(self.tool_requests)


class CompletionProvider(ABC):
    """
    Abstract completion transport.

    Responsible only for:
        • Sending the transcript and tool declarations
        • Returning text and/or tool requests
        • Mapping backend failures to ProviderError

    Providers never retry. Wall-clock timeouts are theirs to enforce.
    """

    @property
    def name(self) -> str:
        """Return backend identity."""
        return self.__class__.__name__

    @abstractmethod
    def complete(
        self,
        transcript: Transcript,
        tools: Sequence[ToolDeclaration] = (),
        tool_choice: str = "auto",
    ) -> Completion:
        """
        Execute one completion request.

        Parameters
        ----------
        transcript : Transcript
            Full ordered conversation so far.

        tools : Sequence[ToolDeclaration]
            Tools offered to the model. Empty means plain chat.

        tool_choice : str
            "auto", "none", or the name of a declared tool to force.

        Raises
        ------
        ProviderError
            Network, auth, rate-limit or malformed-response failures.
        """
        raise NotImplementedError


def check_tool_choice(tools: Sequence[ToolDeclaration], tool_choice: str) -> None:
    if tool_choice in ("auto", "none"):
        return

    names: List[str] = [t.name for t in tools]
    if tool_choice not in names:
        raise ValueError(
            f"tool_choice '{tool_choice}' must be 'auto', 'none' or a declared tool: {names}"
        )
