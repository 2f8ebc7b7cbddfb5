from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Tuple
from threading import RLock
import logging

from .schema import ToolDeclaration

logger = logging.getLogger(__name__)

ToolHandler = Callable[[Dict[str, Any]], Any]


class ToolRegistry:
    """
    Authoritative registry of all tools available to an agent.

    This forms the capability boundary: if a tool is not registered here,
    it is not executable by the agent. Each entry pairs a ToolDeclaration
    (what the model sees) with the handler that executes it.
    """

    def __init__(self) -> None:
        self._tools: Dict[str, Tuple[ToolDeclaration, ToolHandler]] = {}
        self._lock = RLock()
        logger.info("[TOOL REGISTRY] Initialized (empty)")

    # ------------------------------------------------------------------
    # Strict Registration
    # ------------------------------------------------------------------

    def register(self, declaration: ToolDeclaration, handler: ToolHandler) -> None:

        self._validate(declaration, handler)

        with self._lock:
            if declaration.name in self._tools:
                raise ValueError(f"Tool '{declaration.name}' is already registered.")

            self._tools[declaration.name] = (declaration, handler)

            logger.info(
                "[TOOL REGISTRY] Tool registered | total=%d",
                len(self._tools)
            )

            logger.info(declaration.to_debug_string())

    # ------------------------------------------------------------------
    # Bulk Registration (Strict, all-or-nothing)
    # ------------------------------------------------------------------

    def register_many(self, entries: Iterable[Tuple[ToolDeclaration, ToolHandler]]) -> None:

        entries = list(entries)

        with self._lock:
            seen = set()
            for declaration, handler in entries:
                self._validate(declaration, handler)
                if declaration.name in self._tools or declaration.name in seen:
                    raise ValueError(f"Tool '{declaration.name}' is already registered.")
                seen.add(declaration.name)

            for declaration, handler in entries:
                self._tools[declaration.name] = (declaration, handler)
                logger.info("[TOOL REGISTRY] Bulk registered: %s", declaration.name)

            logger.info(
                "[TOOL REGISTRY] Bulk registration complete | total=%d",
                len(self._tools)
            )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, tool_name: str) -> ToolDeclaration:

        with self._lock:
            try:
                declaration = self._tools[tool_name][0]
                logger.debug("[TOOL REGISTRY] Lookup success: %s", tool_name)
                return declaration
            except KeyError:
                logger.error(
                    "[TOOL REGISTRY] Lookup FAILED: %s | available=%s",
                    tool_name,
                    list(self._tools.keys())
                )
                raise KeyError(f"Tool '{tool_name}' is not registered.") from None

    def get_handler(self, tool_name: str) -> ToolHandler:

        with self._lock:
            try:
                return self._tools[tool_name][1]
            except KeyError:
                raise KeyError(f"Tool '{tool_name}' is not registered.") from None

    def has_tool(self, tool_name: str) -> bool:
        with self._lock:
            exists = tool_name in self._tools
            logger.debug(
                "[TOOL REGISTRY] has_tool(%s) -> %s",
                tool_name,
                exists
            )
            return exists

    def list_tools(self) -> List[ToolDeclaration]:

        with self._lock:
            return sorted((d for d, _ in self._tools.values()), key=lambda d: d.name)

    def list_tool_names(self) -> List[str]:

        with self._lock:
            return sorted(self._tools.keys())

    def declarations(self) -> List[ToolDeclaration]:
        """Declarations in registration order, as offered to the provider."""
        with self._lock:
            return [d for d, _ in self._tools.values()]

    def __contains__(self, tool_name: object) -> bool:
        with self._lock:
            return tool_name in self._tools

    def __len__(self) -> int:
        with self._lock:
            return len(self._tools)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(declaration: ToolDeclaration, handler: ToolHandler) -> None:
        if not isinstance(declaration, ToolDeclaration):
            raise TypeError("Tool must be described by a ToolDeclaration.")

        if not callable(handler):
            raise TypeError(f"Handler for tool '{declaration.name}' must be callable.")
