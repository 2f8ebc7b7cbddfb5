from __future__ import annotations

import time
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Optional, Sequence, Union

from ..errors import EmbeddingError, ToolContractError, ToolExecutionError
from ..models import ToolRequest, ToolResult
from .registry import ToolRegistry
from .validator import ArgumentValidator

logger = logging.getLogger(__name__)


class ToolDispatcher:
    """
    Executes named tools with validated arguments.

    The dispatcher enforces the name/argument contract and captures every
    tool-level failure into a ToolResult, so callers never see a raw
    exception from a handler:

        unknown tool / bad arguments → status "rejected" (ToolContractError)
        handler raised               → status "failure"  (ToolExecutionError)

    EmbeddingError is not a tool-level failure. It propagates to the
    caller and aborts the run.
    """

    def __init__(self, registry: ToolRegistry, max_workers: int = 4) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")

        self._registry = registry
        self._validator = ArgumentValidator(registry)
        self._max_workers = max_workers

    # ============================================================
    # SINGLE DISPATCH
    # ============================================================

    def dispatch(
        self,
        tool_name: str,
        raw_arguments: Union[str, Dict[str, Any], None],
        request_id: Optional[str] = None,
    ) -> ToolResult:

        start = time.monotonic()
        request_id = request_id or f"local_{tool_name}"

        logger.info(f"[DISPATCH] Calling tool: {tool_name} (request={request_id})")
        logger.debug(f"[DISPATCH INPUT] Tool={tool_name}, Args={raw_arguments}")

        # ------------------------------------------------------------
        # Contract Validation
        # ------------------------------------------------------------
        try:
            args = self._validator.validate(tool_name, raw_arguments)
            handler = self._registry.get_handler(tool_name)
        except ToolContractError as e:
            logger.warning(f"[DISPATCH] Rejected {tool_name}: {e}")
            return self._rejected_result(request_id, tool_name, e, start)
        except KeyError as e:
            return self._rejected_result(request_id, tool_name, ToolContractError(e.args[0]), start)

        # ------------------------------------------------------------
        # Execution
        # ------------------------------------------------------------
        try:
            output = handler(args)
        except ToolContractError as e:
            # Handlers may apply their own argument checks
            logger.warning(f"[DISPATCH] Handler rejected {tool_name}: {e}")
            return self._rejected_result(request_id, tool_name, e, start)
        except EmbeddingError:
            logger.error(f"[DISPATCH] Embedding backend failed inside {tool_name}")
            raise
        except Exception as e:
            logger.exception(f"[DISPATCH] Handler failed: {tool_name}")
            error = ToolExecutionError(f"{type(e).__name__}: {e}")
            return self._failure_result(request_id, tool_name, error, start)

        result = self._success_result(request_id, tool_name, output, start)
        logger.info(f"[DISPATCH] {tool_name} ok in {result.latency_ms}ms")
        return result

    def dispatch_request(self, request: ToolRequest) -> ToolResult:
        return self.dispatch(request.tool_name, request.arguments, request_id=request.id)

    # ============================================================
    # FAN-OUT / FAN-IN
    # ============================================================

    def dispatch_many(self, requests: Sequence[ToolRequest]) -> Dict[str, ToolResult]:
        """
        Dispatch all requests of one model turn.

        Handlers run concurrently when more than one request is present and
        `max_workers` allows it. The call returns only after every dispatch
        has finished. Results are keyed by request id so the caller can
        restore issuance order. An EmbeddingError from any request is
        re-raised once the whole batch is done.
        """

        ids = [r.id for r in requests]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate request ids in one turn: {ids}")

        if len(requests) <= 1 or self._max_workers == 1:
            return {r.id: self.dispatch_request(r) for r in requests}

        workers = min(self._max_workers, len(requests))
        logger.info(f"[DISPATCH] Fan-out | requests={len(requests)} | workers={workers}")

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="agentloop-tool") as pool:
            futures = {r.id: pool.submit(self.dispatch_request, r) for r in requests}

        return {request_id: future.result() for request_id, future in futures.items()}

    # ============================================================
    # RESULT BUILDERS
    # ============================================================

    def _success_result(
        self,
        request_id: str,
        tool_name: str,
        output: Any,
        start_time: float,
    ) -> ToolResult:

        return ToolResult(
            request_id=request_id,
            tool_name=tool_name,
            status="success",
            output=output,
            error=None,
            error_type=None,
            latency_ms=self._latency_ms(start_time),
        )

    def _failure_result(
        self,
        request_id: str,
        tool_name: str,
        error: ToolExecutionError,
        start_time: float,
    ) -> ToolResult:

        return ToolResult(
            request_id=request_id,
            tool_name=tool_name,
            status="failure",
            output=None,
            error=str(error),
            error_type=type(error).__name__,
            latency_ms=self._latency_ms(start_time),
        )

    def _rejected_result(
        self,
        request_id: str,
        tool_name: str,
        error: ToolContractError,
        start_time: float,
    ) -> ToolResult:

        return ToolResult(
            request_id=request_id,
            tool_name=tool_name,
            status="rejected",
            output=None,
            error=str(error),
            error_type=type(error).__name__,
            latency_ms=self._latency_ms(start_time),
        )

    @staticmethod
    def _latency_ms(start_time: float) -> int:
        return int((time.monotonic() - start_time) * 1000)

    # ------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @property
    def max_workers(self) -> int:
        return self._max_workers
