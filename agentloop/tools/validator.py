from __future__ import annotations

from typing import Any, Dict, Union
import json

from pydantic import ValidationError

from ..errors import ToolContractError
from .registry import ToolRegistry
from .schema import ToolDeclaration


class ArgumentValidator:
    """
    Validates raw tool arguments against declared tool contracts.

    Runs at the registry boundary so that an ill-typed payload never
    reaches handler logic. Supports:
    - raw JSON text or already-decoded mappings
    - required / unknown parameter checks
    - JSON-schema primitive types and enums
    - pydantic argument models (`ToolDeclaration.args_model`)
    """

    def __init__(self, registry: ToolRegistry) -> None:
        self._registry = registry

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def validate(self, tool_name: str, raw_arguments: Union[str, Dict[str, Any], None]) -> Dict[str, Any]:

        try:
            declaration = self._registry.get(tool_name)
        except KeyError as e:
            raise ToolContractError(e.args[0]) from None

        args = self._decode(raw_arguments)

        if declaration.args_model is not None:
            return self._validate_model(declaration, args)

        self._check_required(declaration, args)
        self._check_unknown(declaration, args)
        self._check_types(declaration, args)

        return args

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    @staticmethod
    def _decode(raw_arguments: Union[str, Dict[str, Any], None]) -> Dict[str, Any]:

        if raw_arguments is None:
            return {}

        if isinstance(raw_arguments, dict):
            return dict(raw_arguments)

        if isinstance(raw_arguments, str):
            if not raw_arguments.strip():
                return {}
            try:
                decoded = json.loads(raw_arguments)
            except json.JSONDecodeError as e:
                raise ToolContractError(f"Arguments are not valid JSON: {e.msg}") from None

            if not isinstance(decoded, dict):
                raise ToolContractError("Arguments must be a JSON object.")
            return decoded

        raise ToolContractError(
            f"Arguments must be a JSON object, got {type(raw_arguments).__name__}."
        )

    # ------------------------------------------------------------------
    # Validation Steps
    # ------------------------------------------------------------------

    def _validate_model(self, declaration: ToolDeclaration, args: Dict[str, Any]) -> Dict[str, Any]:
        try:
            model = declaration.args_model.model_validate(args)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
                for err in e.errors()
            )
            raise ToolContractError(f"Invalid arguments for '{declaration.name}': {problems}") from None

        return model.model_dump()

    def _check_required(self, declaration: ToolDeclaration, args: Dict[str, Any]) -> None:
        missing = sorted(k for k in declaration.required if k not in args)
        if missing:
            raise ToolContractError(f"Missing required arguments: {missing}")

    def _check_unknown(self, declaration: ToolDeclaration, args: Dict[str, Any]) -> None:
        if declaration.allows_extra:
            return

        extra = sorted(k for k in args if k not in declaration.properties)
        if extra:
            raise ToolContractError(f"Unknown arguments: {extra}")

    def _check_types(self, declaration: ToolDeclaration, args: Dict[str, Any]) -> None:

        for key, prop in declaration.properties.items():

            if key not in args:
                continue  # optional and not present

            value = args[key]

            if not isinstance(prop, dict):
                continue

            expected = prop.get("type")
            if expected is not None and not self._matches_type(expected, value):
                raise ToolContractError(
                    f"Argument '{key}' expected type {expected}, got {type(value).__name__}"
                )

            if "enum" in prop and value not in prop["enum"]:
                raise ToolContractError(
                    f"Argument '{key}' must be one of {prop['enum']}, got {value!r}"
                )

            if expected == "array" and isinstance(prop.get("items"), dict):
                item_type = prop["items"].get("type")
                if item_type and not all(self._matches_type(item_type, v) for v in value):
                    raise ToolContractError(
                        f"Argument '{key}' items expected type {item_type}"
                    )

    # ------------------------------------------------------------------
    # Type Matching
    # ------------------------------------------------------------------

    def _matches_type(self, expected: Any, value: Any) -> bool:

        if isinstance(expected, list):
            return any(self._matches_type(e, value) for e in expected)

        mapping = {
            "string": str,
            "object": dict,
            "array": list,
            "boolean": bool,
        }

        if expected in mapping:
            return isinstance(value, mapping[expected])

        # Prevent bool being accepted as a number
        if expected == "integer":
            return isinstance(value, int) and not isinstance(value, bool)

        if expected == "number":
            return isinstance(value, (int, float)) and not isinstance(value, bool)

        if expected == "null":
            return value is None

        return True  # Unknown type → allow
