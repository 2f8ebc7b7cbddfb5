from typing import List, Optional

import pytest
from pydantic import BaseModel

from agentloop.errors import ToolContractError
from agentloop.tools import ArgumentValidator, ToolDeclaration, ToolRegistry


class FlightArgs(BaseModel):
    arrivalLocation: str
    passengers: int = 1
    tags: Optional[List[str]] = None


@pytest.fixture
def validator():
    registry = ToolRegistry()
    registry.register(
        ToolDeclaration(
            name="checkBudget",
            description="Check if total cost is within budget",
            parameters={
                "type": "object",
                "properties": {
                    "totalCost": {"type": "number"},
                    "budget": {"type": "number"},
                    "currency": {"type": "string", "enum": ["USD", "EUR"]},
                    "nights": {"type": "integer"},
                    "stops": {"type": "array", "items": {"type": "string"}},
                },
                "required": ["totalCost", "budget"],
            },
            strict=True,
        ),
        lambda args: args,
    )
    registry.register(
        ToolDeclaration(name="loose", description="accepts extras"),
        lambda args: args,
    )
    registry.register(
        ToolDeclaration(name="getFlights", description="Find flights", args_model=FlightArgs),
        lambda args: args,
    )
    return ArgumentValidator(registry)


def test_decodes_json_text(validator):
    args = validator.validate("checkBudget", '{"totalCost": 900, "budget": 1000.5}')
    assert args == {"totalCost": 900, "budget": 1000.5}


def test_accepts_mapping_and_empty_payload(validator):
    assert validator.validate("checkBudget", {"totalCost": 1, "budget": 2}) == {"totalCost": 1, "budget": 2}
    assert validator.validate("loose", "") == {}
    assert validator.validate("loose", None) == {}


def test_unknown_tool(validator):
    with pytest.raises(ToolContractError, match="nonexistent"):
        validator.validate("nonexistent", "{}")


@pytest.mark.parametrize("raw", ["{not json", "[1, 2]", '"text"'])
def test_malformed_payload(validator, raw):
    with pytest.raises(ToolContractError):
        validator.validate("loose", raw)


def test_missing_required(validator):
    with pytest.raises(ToolContractError, match="budget"):
        validator.validate("checkBudget", '{"totalCost": 5}')


def test_unknown_argument_rejected_when_strict(validator):
    with pytest.raises(ToolContractError, match="Unknown"):
        validator.validate("checkBudget", {"totalCost": 1, "budget": 2, "tip": 3})


def test_unknown_argument_allowed_when_not_strict(validator):
    assert validator.validate("loose", {"anything": True}) == {"anything": True}


@pytest.mark.parametrize(
    "args",
    [
        {"totalCost": "900", "budget": 1000},
        {"totalCost": True, "budget": 1000},
        {"totalCost": 1, "budget": 2, "nights": 2.5},
        {"totalCost": 1, "budget": 2, "currency": "GBP"},
        {"totalCost": 1, "budget": 2, "stops": ["Paris", 3]},
    ],
)
def test_type_and_enum_violations(validator, args):
    with pytest.raises(ToolContractError):
        validator.validate("checkBudget", args)


def test_pydantic_model_validation(validator):
    args = validator.validate("getFlights", '{"arrivalLocation": "Paris", "passengers": "2"}')
    assert args == {"arrivalLocation": "Paris", "passengers": 2, "tags": None}

    with pytest.raises(ToolContractError, match="arrivalLocation"):
        validator.validate("getFlights", "{}")
