import json
from datetime import datetime, timezone

import pytest

from agentloop.errors import AgentRunError
from agentloop.models import (
    MemoryRecord,
    RunResult,
    RunStatus,
    SystemTurn,
    ToolRequest,
    ToolResult,
    Transcript,
)


def _result(status, output=None, error=None):
    return ToolResult(
        request_id="r",
        tool_name="t",
        status=status,
        output=output,
        error=error,
        error_type=None if status == "success" else "ToolExecutionError",
        latency_ms=1,
    )


def test_tool_result_content():
    assert _result("success", "plain text").to_content() == "plain text"
    assert json.loads(_result("success", {"a": 1}).to_content()) == {"a": 1}

    marker = json.loads(_result("failure", error="boom").to_content())
    assert marker == {"error": "boom", "error_type": "ToolExecutionError"}


def test_tool_request_defaults():
    args = {"x": 1}
    request = ToolRequest("t", args)
    args["x"] = 2

    assert request.id.startswith("call_")
    assert request.arguments == {"x": 1}

    with pytest.raises(ValueError):
        ToolRequest("", "{}")


def test_memory_record_round_trip():
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    record = MemoryRecord("id1", "hello", [0.5, 1], 1, now, now)

    assert record.embedding == (0.5, 1.0)
    assert MemoryRecord.from_dict(record.to_dict()) == record
    assert "embedding" not in record.to_dict(include_embedding=False)

    with pytest.raises(ValueError):
        MemoryRecord("id2", "x", [1.0], -1, now, now)


def test_run_result_cancelled():
    result = RunResult(
        status=RunStatus.CANCELLED,
        transcript=Transcript([SystemTurn("sys")]),
        iterations=0,
        provider_calls=0,
        error="Run cancelled",
    )

    assert result.to_dict()["transcript_length"] == 1
    assert result.answer is None

    with pytest.raises(AgentRunError):
        result.raise_for_status()
