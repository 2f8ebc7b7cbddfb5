from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Type

from pydantic import BaseModel


class Capability(str, Enum):
    """What a tool handler touches. Informational only, dispatch ignores it."""

    PURE = "pure"
    MEMORY_READ = "memory_read"
    MEMORY_WRITE = "memory_write"
    SIDE_EFFECT = "side_effect"


@dataclass(frozen=True)
class ToolDeclaration:
    """
    Declarative contract describing a capability offered to the model.

    A ToolDeclaration defines WHAT the model may ask for, while the handler
    registered next to it in the ToolRegistry defines HOW it runs. This
    object is the canonical contract between all runtime layers:

        Provider → ToolRequest → ArgumentValidator → ToolDispatcher → handler

    Declarations are constructed once at agent configuration time and are
    immutable thereafter.

    Argument Shapes
    ---------------
    Either pass a JSON-schema `parameters` object (with `required`), or a
    pydantic `args_model`. With a model, the JSON schema and the required
    set are derived from it and validation runs through pydantic, so the
    handler receives the model's normalized dump.
    """

    # ------------------------------------------------------------------
    # Core Identity
    # ------------------------------------------------------------------

    name: str
    description: str

    # ------------------------------------------------------------------
    # Schemas (Contract Layer)
    # ------------------------------------------------------------------

    parameters: Dict[str, Any] = field(default_factory=dict)
    required: FrozenSet[str] = frozenset()
    args_model: Optional[Type[BaseModel]] = None

    # ------------------------------------------------------------------
    # Runtime Policy Metadata
    # ------------------------------------------------------------------

    capability: Capability = Capability.PURE
    strict: bool = False
    """Reject arguments not declared in `parameters.properties`."""

    # ------------------------------------------------------------------
    # Validation Layer
    # ------------------------------------------------------------------

    def __post_init__(self):
        """
        Lightweight invariant checks.

        Normalizes the schema into a JSON-schema object and raises early if
        the contract is malformed.
        """

        if not self.name or not isinstance(self.name, str):
            raise ValueError("Tool name must be a non-empty string.")

        if not isinstance(self.description, str):
            raise TypeError("description must be a string.")

        if self.args_model is not None:
            if not (isinstance(self.args_model, type) and issubclass(self.args_model, BaseModel)):
                raise TypeError("args_model must be a pydantic BaseModel subclass.")

            schema = self.args_model.model_json_schema()
            schema.pop("title", None)
            object.__setattr__(self, "parameters", schema)
            object.__setattr__(self, "required", frozenset(schema.get("required", [])))
        else:
            if not isinstance(self.parameters, dict):
                raise TypeError("parameters must be a dictionary.")

            schema = dict(self.parameters) or {"type": "object", "properties": {}}
            schema.setdefault("type", "object")
            schema.setdefault("properties", {})

            required = frozenset(self.required) | frozenset(schema.get("required", []))
            if required:
                schema["required"] = sorted(required)

            object.__setattr__(self, "parameters", schema)
            object.__setattr__(self, "required", required)

        if self.parameters.get("type") != "object":
            raise ValueError("Tool parameters must describe a JSON object.")

        undeclared = [r for r in self.required if r not in self.properties]
        if undeclared:
            raise ValueError(f"Required parameters not declared in properties: {undeclared}")

        object.__setattr__(self, "capability", Capability(self.capability))

    # ------------------------------------------------------------------
    # Derived Properties
    # ------------------------------------------------------------------

    @property
    def properties(self) -> Dict[str, Any]:
        return self.parameters.get("properties", {})

    @property
    def allows_extra(self) -> bool:
        if self.strict:
            return False
        return self.parameters.get("additionalProperties", True) is not False

    def to_provider_schema(self) -> Dict[str, Any]:
        """Render the chat-completions function-tool format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

    def to_debug_string(self) -> str:
        return (
            f"[TOOL] {self.name} | capability={self.capability.value} | "
            f"required={sorted(self.required)} | params={sorted(self.properties)}"
        )
