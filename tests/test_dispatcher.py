import json
import threading
import time

import pytest

from agentloop.errors import EmbeddingError
from agentloop.models import ToolRequest
from agentloop.tools import ToolDeclaration, ToolDispatcher, ToolRegistry


def _registry(**handlers):
    registry = ToolRegistry()
    for name, handler in handlers.items():
        registry.register(
            ToolDeclaration(
                name=name,
                description=name,
                parameters={"type": "object", "properties": {"x": {"type": "integer"}}},
            ),
            handler,
        )
    return registry


def test_success_result():
    dispatcher = ToolDispatcher(_registry(double=lambda a: {"y": a["x"] * 2}))
    result = dispatcher.dispatch("double", '{"x": 21}', request_id="r1")

    assert result.is_success
    assert result.request_id == "r1"
    assert result.output == {"y": 42}
    assert json.loads(result.to_content()) == {"y": 42}


def test_unknown_tool_is_rejected_not_raised():
    dispatcher = ToolDispatcher(_registry())
    result = dispatcher.dispatch("nonexistent", "{}")

    assert result.is_rejected
    assert result.error_type == "ToolContractError"
    assert json.loads(result.to_content())["error_type"] == "ToolContractError"


def test_bad_arguments_never_reach_handler():
    seen = []
    dispatcher = ToolDispatcher(_registry(record=lambda a: seen.append(a)))
    result = dispatcher.dispatch("record", '{"x": "not an int"}')

    assert result.is_rejected
    assert seen == []


def test_handler_exception_becomes_failure():
    def boom(args):
        raise RuntimeError("database offline")

    dispatcher = ToolDispatcher(_registry(boom=boom))
    result = dispatcher.dispatch("boom", "{}")

    assert result.is_failure
    assert result.error_type == "ToolExecutionError"
    assert "database offline" in result.error


def test_embedding_error_propagates_from_dispatch_many():
    finished = []

    def embeds(args):
        raise EmbeddingError("embedding backend down")

    def other(args):
        time.sleep(0.02)
        finished.append(args["x"])
        return args["x"]

    dispatcher = ToolDispatcher(_registry(embeds=embeds, other=other), max_workers=2)

    with pytest.raises(EmbeddingError):
        dispatcher.dispatch_many([
            ToolRequest("embeds", "{}", id="a"),
            ToolRequest("other", '{"x": 7}', id="b"),
        ])

    # the batch completes before the error surfaces
    assert finished == [7]


def test_dispatch_many_runs_handlers_concurrently():
    barrier = threading.Barrier(2, timeout=5)

    def wait(args):
        barrier.wait()
        return args["x"]

    dispatcher = ToolDispatcher(_registry(wait=wait), max_workers=2)
    requests = [
        ToolRequest("wait", '{"x": 1}', id="a"),
        ToolRequest("wait", '{"x": 2}', id="b"),
    ]

    results = dispatcher.dispatch_many(requests)

    assert set(results) == {"a", "b"}
    assert results["a"].output == 1
    assert results["b"].output == 2


def test_dispatch_many_sequential_with_one_worker():
    order = []

    def slow(args):
        time.sleep(0.01)
        order.append(args["x"])
        return args["x"]

    dispatcher = ToolDispatcher(_registry(slow=slow), max_workers=1)
    results = dispatcher.dispatch_many(
        [ToolRequest("slow", {"x": i}, id=f"r{i}") for i in range(3)]
    )

    assert order == [0, 1, 2]
    assert [results[f"r{i}"].output for i in range(3)] == [0, 1, 2]


def test_max_workers_must_be_positive():
    with pytest.raises(ValueError):
        ToolDispatcher(ToolRegistry(), max_workers=0)
