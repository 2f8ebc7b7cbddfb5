import json
import logging
import threading
from typing import Callable, Optional, Union

from ..models import RunResult, SystemTurn, ToolResultTurn, Transcript, UserTurn
from .loop import AgentLoop

logger = logging.getLogger(__name__)

SystemPrompt = Union[str, Callable[[], str]]


class Conversation:
    """
    Multi-turn session on top of an AgentLoop.

    Keeps the transcript across user inputs. Every `send` runs the loop
    once and adopts the resulting transcript, including for failed or
    exhausted runs, so history is never discarded. Calls are serialized.

    `system_prompt` is either a fixed string or a zero-argument callable.
    A callable is rendered again on every `send` and its text replaces
    the leading system turn, so prompts built from live state (a notepad
    file, for instance) stay current.
    """

    def __init__(self, loop: AgentLoop, system_prompt: SystemPrompt) -> None:
        if not system_prompt:
            raise ValueError("system_prompt must be non-empty")

        self.loop = loop
        self.system_prompt = system_prompt
        self._lock = threading.Lock()
        self._transcript = Transcript([SystemTurn(self._render_prompt())])
        self._turns = 0

    def send(self, user_text: str, cancel_event: Optional[threading.Event] = None) -> RunResult:

        with self._lock:
            self._turns += 1
            logger.info(f"[CONVERSATION] Turn {self._turns}: {user_text}")

            transcript = self._seed()
            transcript.append(UserTurn(user_text))

            result = self.loop.run(transcript, cancel_event=cancel_event)
            self._transcript = self._adopt(result)

            logger.info(
                f"[CONVERSATION] Turn {self._turns} -> {result.status.value} "
                f"| transcript={len(self._transcript)}"
            )
            return result

    @property
    def history(self) -> Transcript:
        with self._lock:
            return self._transcript.copy()

    @property
    def turn_count(self) -> int:
        return self._turns

    def reset(self) -> None:
        with self._lock:
            logger.info("[CONVERSATION] Reset")
            self._transcript = Transcript([SystemTurn(self._render_prompt())])
            self._turns = 0

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _render_prompt(self) -> str:
        if callable(self.system_prompt):
            prompt = self.system_prompt()
            if not prompt:
                raise ValueError("system_prompt callable returned an empty prompt")
            return prompt
        return self.system_prompt

    def _seed(self) -> Transcript:
        if not callable(self.system_prompt):
            return self._transcript.copy()

        return Transcript([SystemTurn(self._render_prompt())] + list(self._transcript.turns[1:]))

    @staticmethod
    def _adopt(result: RunResult) -> Transcript:
        """
        History to keep after a run. A run aborted mid-dispatch leaves
        requests unanswered; they are closed with error results so the
        next user turn can be appended.
        """
        history = result.transcript.copy()

        for request in history.pending_requests():
            logger.warning(f"[CONVERSATION] Closing unanswered request {request.id}")
            history.append(
                ToolResultTurn(
                    request_id=request.id,
                    tool_name=request.tool_name,
                    content=json.dumps({
                        "error": f"Run aborted: {result.error}",
                        "error_type": result.error_type,
                    }),
                    is_error=True,
                )
            )

        return history
