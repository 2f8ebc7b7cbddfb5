from .memory_tools import GET_MEMORY_TOOL, SAVE_MEMORY_TOOL, register_memory_tools
from .notepad import NOTEPAD_TOOL, Notepad, notepad_prompt, register_notepad_tool
from .completion import completion_tool

__all__ = [
    "GET_MEMORY_TOOL",
    "SAVE_MEMORY_TOOL",
    "register_memory_tools",
    "NOTEPAD_TOOL",
    "Notepad",
    "notepad_prompt",
    "register_notepad_tool",
    "completion_tool",
]
