from .schema import Capability, ToolDeclaration
from .registry import ToolHandler, ToolRegistry
from .validator import ArgumentValidator
from .dispatcher import ToolDispatcher

__all__ = [
    "Capability",
    "ToolDeclaration",
    "ToolHandler",
    "ToolRegistry",
    "ArgumentValidator",
    "ToolDispatcher",
]
