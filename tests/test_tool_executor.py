"""
Sanity tests for the tool dispatcher.

Run with:
$ pytest -q
"""

import json

import pytest

from salesagent.agent.tool_executor import (
    ToolExecutionError,
    ToolValidationError,
    UnknownTool,
    dispatch,
    execute_tool,
)


def _error_message(envelope) -> str:
    payload = json.loads(envelope.text)
    assert payload["status"] == "error"
    return payload["message"]


def test_execute_tool_success(registry) -> None:
    """Executor should return the handler's envelope unchanged."""
    envelope = execute_tool("add", {"a": 2, "b": 3}, registry)

    assert envelope.text == "5"
    assert envelope.content[0].type == "text"


def test_execute_tool_missing(registry) -> None:
    with pytest.raises(UnknownTool) as exc_info:
        execute_tool("not_a_tool", {}, registry)
    assert "not_a_tool" in str(exc_info.value)


@pytest.mark.parametrize("name", ["not_a_tool", "", "ADD"])
def test_dispatch_unknown_tool_returns_error_content(registry, name) -> None:
    envelope = dispatch(name, {}, registry)

    assert "is not registered" in _error_message(envelope)


def test_validation_lists_every_violation(registry) -> None:
    with pytest.raises(ToolValidationError) as exc_info:
        execute_tool("add", {"a": "two"}, registry)  # wrong type for 'a', missing 'b'

    violations = exc_info.value.violations
    assert len(violations) == 2
    assert any(v.startswith("a:") for v in violations)
    assert any(v.startswith("b:") for v in violations)


def test_dispatch_validation_failure_is_absorbed(registry) -> None:
    message = _error_message(dispatch("add", {"a": 2}, registry))

    assert "Invalid arguments for tool 'add'" in message
    assert "b:" in message


def test_non_mapping_input_is_a_validation_error(registry) -> None:
    with pytest.raises(ToolValidationError):
        execute_tool("add", ["not", "a", "mapping"], registry)


def test_unknown_fields_are_ignored(registry) -> None:
    assert execute_tool("add", {"a": 1, "b": 1, "c": 99}, registry).text == "2"


def test_handler_exception_becomes_error_content(registry) -> None:
    with pytest.raises(ToolExecutionError):
        execute_tool("boom", {}, registry)

    assert "kaboom" in _error_message(dispatch("boom", {}, registry))


def test_handler_must_return_envelope(registry) -> None:
    with pytest.raises(ToolExecutionError) as exc_info:
        execute_tool("sloppy", None, registry)
    assert "content envelope" in str(exc_info.value)


def test_dispatch_defaults_to_process_registry() -> None:
    offers = json.loads(dispatch("getOffers", {"category": "business"}).text)

    assert [offer["id"] for offer in offers] == ["business_standard", "business_enterprise"]
