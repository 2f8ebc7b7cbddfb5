from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple, Union

from ..errors import TranscriptError
from .tool_request import ToolRequest


@dataclass(frozen=True)
class SystemTurn:
    """Instructions seeding a run. A transcript always starts with one."""

    content: str
    role: str = field(default="system", init=False)


@dataclass(frozen=True)
class UserTurn:
    content: str
    role: str = field(default="user", init=False)


@dataclass(frozen=True)
class AssistantTurn:
    """
    A model turn.

    Carries text, tool requests, or both. A turn with tool requests must
    be answered by one ToolResultTurn per request before the next model
    call.
    """

    content: Optional[str] = None
    tool_requests: Tuple[ToolRequest, ...] = ()
    role: str = field(default="assistant", init=False)

    def __post_init__(self):
        object.__setattr__(self, "tool_requests", tuple(self.tool_requests))

        ids = [r.id for r in self.tool_requests]
        if len(ids) != len(set(ids)):
            raise TranscriptError(f"Duplicate tool request ids in one turn: {ids}")

    @property
    def has_tool_requests(self) -> bool:
        return bool(self.tool_requests)


@dataclass(frozen=True)
class ToolResultTurn:
    """Result of one ToolRequest, correlated by `request_id`."""

    request_id: str
    tool_name: str
    content: str
    is_error: bool = False
    role: str = field(default="tool", init=False)


ConversationTurn = Union[SystemTurn, UserTurn, AssistantTurn, ToolResultTurn]

_TURN_TYPES = (SystemTurn, UserTurn, AssistantTurn, ToolResultTurn)


class Transcript:
    """
    Ordered, append-only conversation history.

    Turns are immutable and are never removed or replaced. Every
    ToolResultTurn must answer a request of the most recent assistant
    turn, with only other tool results in between, and each request is
    answered at most once. No other turn may follow an assistant turn
    until all of its requests are answered.
    """

    def __init__(self, turns: Optional[List[ConversationTurn]] = None) -> None:
        self._turns: List[ConversationTurn] = []
        for turn in turns or []:
            self.append(turn)

    # ------------------------------------------------------------------
    # Append
    # ------------------------------------------------------------------

    def append(self, turn: ConversationTurn) -> None:
        if not isinstance(turn, _TURN_TYPES):
            raise TranscriptError(f"Not a conversation turn: {turn!r}")

        if isinstance(turn, ToolResultTurn):
            pending = {r.id for r in self.pending_requests()}
            if turn.request_id not in pending:
                raise TranscriptError(
                    f"Tool result '{turn.request_id}' does not answer a pending "
                    f"request of the preceding assistant turn."
                )
        else:
            pending = [r.id for r in self.pending_requests()]
            if pending:
                raise TranscriptError(
                    f"Cannot append a {turn.role} turn while requests {pending} "
                    f"are unanswered."
                )

        self._turns.append(turn)

    def extend(self, turns) -> None:
        for turn in turns:
            self.append(turn)

    # ------------------------------------------------------------------
    # Correlation
    # ------------------------------------------------------------------

    def pending_requests(self) -> List[ToolRequest]:
        """Requests of the last assistant turn that have no result yet."""
        answered = set()

        for turn in reversed(self._turns):
            if isinstance(turn, ToolResultTurn):
                answered.add(turn.request_id)
                continue

            if isinstance(turn, AssistantTurn):
                return [r for r in turn.tool_requests if r.id not in answered]

            return []

        return []

    # ------------------------------------------------------------------
    # Read Access
    # ------------------------------------------------------------------

    @property
    def last(self) -> Optional[ConversationTurn]:
        return self._turns[-1] if self._turns else None

    @property
    def turns(self) -> Tuple[ConversationTurn, ...]:
        return tuple(self._turns)

    def copy(self) -> "Transcript":
        clone = Transcript()
        clone._turns = list(self._turns)
        return clone

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[ConversationTurn]:
        return iter(list(self._turns))

    def __getitem__(self, index):
        return self._turns[index]

    def __repr__(self) -> str:
        roles = ",".join(t.role for t in self._turns)
        return f"Transcript(len={len(self._turns)}, roles=[{roles}])"
