from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel, Field

from ..registry import ToolRegistry
from ..schema import Capability, ToolDeclaration

logger = logging.getLogger(__name__)


NOTEPAD_PROMPT = """You are a helpful assistant.

You have a notepad that you can write to to keep track of information about the user."""


class NotepadArgs(BaseModel):
    content: str = Field(
        min_length=1,
        description="The content to write to your notepad.",
    )


NOTEPAD_TOOL = ToolDeclaration(
    name="notepad",
    description="Use this function to write to your notepad.",
    args_model=NotepadArgs,
    capability=Capability.MEMORY_WRITE,
)


class Notepad:
    """
    Append-only scratch text the model writes to and reads back through
    its system prompt.

    With a `path` the notes live in a UTF-8 text file and survive restarts.
    Without one they are kept in memory for the lifetime of the object.
    Each note is stored on its own line.
    """

    def __init__(self, path: Optional[str] = None) -> None:
        self._path = Path(path) if path else None
        self._lock = threading.Lock()
        self._buffer = ""

    def read(self) -> str:
        if self._path is None:
            return self._buffer

        if not self._path.exists():
            return ""

        with open(self._path, encoding="utf-8") as f:
            return f.read()

    def append(self, content: str) -> None:
        with self._lock:
            if self._path is None:
                self._buffer += content + "\n"
                return

            if not self._path.parent.exists():
                self._path.parent.mkdir(parents=True, exist_ok=True)

            with open(self._path, "a", encoding="utf-8") as f:
                f.write(content + "\n")

        logger.info("[NOTEPAD] Appended %d chars | path=%s", len(content), self._path)

    @property
    def path(self) -> Optional[Path]:
        return self._path


def notepad_prompt(notepad: Notepad, base: str = NOTEPAD_PROMPT) -> Callable[[], str]:
    """System prompt renderer that appends the current notes to `base`."""

    def render() -> str:
        return f"{base}\n\nHere is your notepad:\n{notepad.read()}"

    return render


def register_notepad_tool(registry: ToolRegistry, notepad: Notepad) -> None:

    def write_notepad(args: Dict[str, Any]) -> Dict[str, Any]:
        notepad.append(args["content"])
        return {"content": args["content"]}

    registry.register(NOTEPAD_TOOL, write_notepad)
