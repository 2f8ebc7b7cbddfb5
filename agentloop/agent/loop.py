import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..errors import EmbeddingError, ProviderError
from ..models import (
    AssistantTurn,
    RunResult,
    RunStatus,
    SystemTurn,
    ToolRequest,
    ToolResult,
    ToolResultTurn,
    Transcript,
)
from ..providers.base import CompletionProvider
from ..tools.dispatcher import ToolDispatcher
from ..tools.schema import ToolDeclaration
from .state import AgentRunState, LoopState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Sentinel:
    """
    Designates a "decision" tool whose successful result ends the run.

    done_field : Optional[str]
        When set, the tool output must be a mapping with a truthy value
        under this key. A falsy decision is treated as an ordinary tool
        result and the loop continues.

    payload_field : Optional[str]
        Key of the output returned as RunResult.payload. None returns the
        whole output.

    prerequisites : tuple of tool names
        Tools that must have succeeded earlier in the run before the
        decision is accepted. A premature decision call is answered with a
        rejected tool result. Empty by default: the decision is trusted
        verbatim.
    """

    tool_name: str
    done_field: Optional[str] = None
    payload_field: Optional[str] = None
    prerequisites: Tuple[str, ...] = ()

    def __post_init__(self):
        if not self.tool_name:
            raise ValueError("Sentinel.tool_name must be non-empty.")
        object.__setattr__(self, "prerequisites", tuple(self.prerequisites))

    def accepts(self, result: ToolResult) -> bool:
        if result.tool_name != self.tool_name or not result.is_success:
            return False

        if self.done_field is None:
            return True

        output = result.output
        return isinstance(output, dict) and bool(output.get(self.done_field))

    def payload(self, result: ToolResult) -> Any:
        if self.payload_field is not None and isinstance(result.output, dict):
            return result.output.get(self.payload_field)
        return result.output


class AgentLoop:
    """
    Bounded tool-calling orchestration loop.

    One `run` drives the state machine

        AWAITING_MODEL ──text──────────────→ DONE
        AWAITING_MODEL ──tool requests─────→ DISPATCHING_TOOLS
        DISPATCHING_TOOLS ──results appended→ AWAITING_MODEL  (iteration += 1)
        DISPATCHING_TOOLS ──sentinel accepted→ DONE
        AWAITING_MODEL ──iteration == max───→ EXHAUSTED
        AWAITING_MODEL ──ProviderError──────→ FAILED
        DISPATCHING_TOOLS ──EmbeddingError──→ FAILED
        AWAITING_MODEL ──cancel_event set───→ CANCELLED

    so the provider is called at most `max_iterations` times per run.
    Tool-level failures never end a run; they come back to the model as
    error-marked tool-result turns. An EmbeddingError raised by a handler
    is fatal: the run fails and the requests of that round stay
    unanswered in the returned transcript.
    """

    def __init__(
        self,
        provider: CompletionProvider,
        dispatcher: ToolDispatcher,
        *,
        max_iterations: int = 10,
        sentinel: Optional[Sentinel] = None,
        tool_choice: str = "auto",
        declarations: Optional[Sequence[ToolDeclaration]] = None,
    ) -> None:

        if max_iterations <= 0:
            raise ValueError("max_iterations must be positive")

        self.provider = provider
        self.dispatcher = dispatcher
        self.max_iterations = max_iterations
        self.sentinel = sentinel
        self.tool_choice = tool_choice
        self._declarations = list(declarations) if declarations is not None else None

    # ============================================================
    # PUBLIC ENTRY POINT
    # ============================================================

    def run(
        self,
        transcript: Transcript,
        cancel_event: Optional[threading.Event] = None,
    ) -> RunResult:
        """
        Run the loop on a copy of `transcript` until a terminal state.

        The returned RunResult always carries the transcript accumulated
        so far, whatever the outcome.
        """

        self._check_seed(transcript)
        declarations = self.declarations()
        self._check_tool_choice(declarations)

        run = AgentRunState(transcript=transcript.copy())
        run_start = time.monotonic()

        logger.info("====================================================")
        logger.info(
            f"[AGENT] Run start | provider={self.provider.name} | "
            f"tools={[d.name for d in declarations]} | max_iterations={self.max_iterations}"
        )
        logger.info("====================================================")

        while not run.is_terminal:

            # --------------------------------------------------------
            # AWAITING_MODEL
            # --------------------------------------------------------
            if cancel_event is not None and cancel_event.is_set():
                logger.warning("[AGENT] Cancelled before provider call")
                self._finish(run, LoopState.CANCELLED, RunStatus.CANCELLED, error="Run cancelled")
                break

            if run.iteration >= self.max_iterations:
                logger.warning(f"[AGENT] Iteration budget exhausted ({self.max_iterations})")
                self._finish(
                    run,
                    LoopState.EXHAUSTED,
                    RunStatus.EXHAUSTED,
                    error=f"No final answer within {self.max_iterations} iterations",
                )
                break

            tool_choice = self.tool_choice if run.provider_calls == 0 else "auto"

            logger.info(f"[AGENT] Iteration {run.iteration + 1}/{self.max_iterations}")
            t0 = time.monotonic()

            try:
                run.provider_calls += 1
                completion = self.provider.complete(run.transcript, declarations, tool_choice)
            except ProviderError as e:
                logger.error(f"[AGENT] Provider failed: {e}")
                self._finish(
                    run, LoopState.FAILED, RunStatus.FAILED, error=str(e), error_type=type(e).__name__
                )
                break

            logger.info(f"[PROVIDER] {time.monotonic() - t0:.2f}s")

            turn = AssistantTurn(content=completion.text, tool_requests=completion.tool_requests)
            run.transcript.append(turn)

            if not turn.has_tool_requests:
                logger.info("[AGENT] Final answer received")
                self._finish(run, LoopState.DONE, RunStatus.DONE, text=completion.text or "")
                break

            # --------------------------------------------------------
            # DISPATCHING_TOOLS
            # --------------------------------------------------------
            run.transition(LoopState.DISPATCHING_TOOLS)
            try:
                accepted = self._dispatch_turn(run, turn.tool_requests)
            except EmbeddingError as e:
                logger.error(f"[AGENT] Embedding failed during dispatch: {e}")
                self._finish(
                    run, LoopState.FAILED, RunStatus.FAILED, error=str(e), error_type=type(e).__name__
                )
                break
            run.iteration += 1

            if accepted is not None:
                logger.info(f"[AGENT] Sentinel '{accepted.tool_name}' accepted. Stopping.")
                self._finish(
                    run,
                    LoopState.DONE,
                    RunStatus.DONE,
                    payload=self.sentinel.payload(accepted),
                )
                break

            run.transition(LoopState.AWAITING_MODEL)

        logger.info(
            f"[AGENT] Run end | status={run.result.status.value} | "
            f"provider_calls={run.provider_calls} | {time.monotonic() - run_start:.2f}s"
        )
        return run.result

    def declarations(self) -> List[ToolDeclaration]:
        """Tools offered to the provider: explicit list, else the registry's."""
        if self._declarations is not None:
            return list(self._declarations)
        return self.dispatcher.registry.declarations()

    # ============================================================
    # TOOL DISPATCH
    # ============================================================

    def _dispatch_turn(
        self,
        run: AgentRunState,
        requests: Sequence[ToolRequest],
    ) -> Optional[ToolResult]:
        """
        Dispatch every request of one assistant turn and append the
        results in request order. Returns the accepted sentinel result,
        if any.
        """

        premature: Dict[str, ToolResult] = {}
        runnable: List[ToolRequest] = []

        for request in requests:
            missing = self._missing_prerequisites(run, request)
            if missing:
                logger.warning(
                    f"[AGENT] Sentinel '{request.tool_name}' called before {missing}"
                )
                premature[request.id] = ToolResult(
                    request_id=request.id,
                    tool_name=request.tool_name,
                    status="rejected",
                    output=None,
                    error=f"Cannot complete yet. Call these tools first: {missing}",
                    error_type="ToolContractError",
                    latency_ms=0,
                )
            else:
                runnable.append(request)

        t0 = time.monotonic()
        results = self.dispatcher.dispatch_many(runnable)
        results.update(premature)
        logger.info(f"[DISPATCH] {len(requests)} request(s) in {time.monotonic() - t0:.2f}s")

        accepted = None

        for request in requests:
            result = results[request.id]

            run.transcript.append(
                ToolResultTurn(
                    request_id=request.id,
                    tool_name=request.tool_name,
                    content=result.to_content(),
                    is_error=not result.is_success,
                )
            )

            if result.is_success:
                run.succeeded_tools.add(request.tool_name)
            else:
                logger.warning(
                    f"[AGENT] Tool {request.tool_name} -> {result.status}: {result.error}"
                )

            if accepted is None and self.sentinel is not None and self.sentinel.accepts(result):
                accepted = result

        return accepted

    def _missing_prerequisites(self, run: AgentRunState, request: ToolRequest) -> List[str]:
        if self.sentinel is None or request.tool_name != self.sentinel.tool_name:
            return []
        return [p for p in self.sentinel.prerequisites if p not in run.succeeded_tools]

    # ============================================================
    # HELPERS
    # ============================================================

    def _finish(
        self,
        run: AgentRunState,
        state: LoopState,
        status: RunStatus,
        text: Optional[str] = None,
        payload: Any = None,
        error: Optional[str] = None,
        error_type: Optional[str] = None,
    ) -> None:

        run.transition(state)
        run.result = RunResult(
            status=status,
            transcript=run.transcript,
            iterations=run.iteration,
            provider_calls=run.provider_calls,
            text=text,
            payload=payload,
            error=error,
            error_type=error_type,
        )

    @staticmethod
    def _check_seed(transcript: Transcript) -> None:
        if not isinstance(transcript, Transcript):
            raise TypeError("transcript must be a Transcript")

        if len(transcript) == 0 or not isinstance(transcript[0], SystemTurn):
            raise ValueError("Transcript must be non-empty and start with a system turn.")

        if transcript.pending_requests():
            raise ValueError("Transcript has unanswered tool requests.")

    def _check_tool_choice(self, declarations: Sequence[ToolDeclaration]) -> None:
        if self.tool_choice in ("auto", "none"):
            return

        if self.tool_choice not in {d.name for d in declarations}:
            raise ValueError(f"Forced tool '{self.tool_choice}' is not declared.")
