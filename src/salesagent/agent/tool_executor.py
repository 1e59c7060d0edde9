"""Dispatches tool calls registered in ``salesagent.tools`` and wraps errors."""

import logging
from typing import (
    Any,
    List,
)

from pydantic import ValidationError

from salesagent.core.schema import ContentEnvelope
from salesagent.tools import (
    TOOL_REGISTRY,
    ToolNotFound,
    ToolRegistry,
)

logger = logging.getLogger(__name__)


class ToolDispatchError(RuntimeError):
    """Base class for failures absorbed at the dispatcher boundary."""


class UnknownTool(ToolDispatchError):
    """Raised when the requested tool is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Tool '{name}' is not registered.")
        self.name = name


class ToolValidationError(ToolDispatchError):
    """Raised when the raw input violates the tool's input schema."""

    def __init__(self, name: str, violations: List[str]) -> None:
        super().__init__(f"Invalid arguments for tool '{name}': " + "; ".join(violations))
        self.name = name
        self.violations = violations


class ToolExecutionError(ToolDispatchError):
    """Raised when a tool handler fails or returns a malformed result."""


def _describe_violations(exc: ValidationError) -> List[str]:
    violations = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "input"
        violations.append(f"{location}: {error['msg']}")
    return violations


def execute_tool(
    name: str, raw_input: Any = None, registry: ToolRegistry | None = None
) -> ContentEnvelope:
    """
    Look up *name* in the registry, validate *raw_input* and invoke the handler.

    Parameters
    ----------
    name:
        The registered tool name.
    raw_input:
        Arguments for the tool, usually a mapping.  If *None*, an empty dict is assumed.
    registry:
        Registry to use; defaults to the process-wide :data:`TOOL_REGISTRY`.

    Returns
    -------
    ContentEnvelope
        The handler's envelope, unchanged.

    Raises
    ------
    UnknownTool
        If the tool is missing.
    ToolValidationError
        If the input violates the schema (every violation is listed).
    ToolExecutionError
        If the handler raises or does not return a ``ContentEnvelope``.
    """
    if registry is None:
        registry = TOOL_REGISTRY
    if raw_input is None:
        raw_input = {}

    try:
        spec = registry.lookup(name)
    except ToolNotFound as exc:
        raise UnknownTool(name) from exc

    try:
        data = spec.args_schema.model_validate(raw_input)
    except ValidationError as exc:
        raise ToolValidationError(name, _describe_violations(exc)) from exc

    try:
        logger.debug("Executing tool '%s' with args=%s", name, raw_input)
        result = spec.handler(data)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unhandled error in tool '%s'", name)
        raise ToolExecutionError(f"Tool '{name}' raised an error: {exc}") from exc

    if not isinstance(result, ContentEnvelope):
        raise ToolExecutionError(
            f"Tool '{name}' returned {type(result).__name__} instead of a content envelope."
        )
    return result


def dispatch(
    name: str, raw_input: Any = None, registry: ToolRegistry | None = None
) -> ContentEnvelope:
    """
    Run a tool and always hand back a content envelope.

    Dispatch failures never propagate: they are logged and surfaced as an error-flavored text item,
    because the caller expects an envelope either way.
    """
    try:
        return execute_tool(name, raw_input, registry)
    except ToolDispatchError as exc:
        logger.warning("Tool failure: %s", exc)
        return ContentEnvelope.error(str(exc))

