"""
Tool registry for salesagent.

This module provides a declarative :class:`ToolSpec`, a :class:`ToolRegistry` to look tools up by
name, and a decorator to register handler functions into the process-wide registry.  Each tool
declares its input contract as a Pydantic model; the JSON schema exported to agents is derived from
that model.
"""

import logging
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Mapping,
)

from pydantic import (
    BaseModel,
    ConfigDict,
)

from salesagent.core.schema import ContentEnvelope

logger = logging.getLogger(__name__)

ToolHandler = Callable[[Any], ContentEnvelope]


class DuplicateToolName(ValueError):
    """Raised when a tool name is registered twice."""


class ToolNotFound(KeyError):
    """Raised when looking up a name that is not registered."""


class RegistryFrozen(RuntimeError):
    """Raised when registering into a registry that already serves dispatches."""


class ToolSpec(BaseModel):
    """Declarative tool specification for registration and validation."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    name: str
    description: str = ""
    args_schema: type[BaseModel]
    handler: ToolHandler

    @property
    def input_schema(self) -> Dict[str, Any]:
        return self.args_schema.model_json_schema()


class ToolRegistry:
    """Append-only store of tool specs keyed by name."""

    def __init__(self) -> None:
        self._tools: Dict[str, ToolSpec] = {}
        self._frozen = False

    def register(self, spec: ToolSpec) -> None:
        if self._frozen:
            raise RegistryFrozen(f"Cannot register '{spec.name}': registry is frozen.")
        if spec.name in self._tools:
            raise DuplicateToolName(f"Tool '{spec.name}' is already registered.")
        logger.debug("Registering tool '%s'", spec.name)
        self._tools[spec.name] = spec

    def lookup(self, name: str) -> ToolSpec:
        try:
            return self._tools[name]
        except KeyError:
            raise ToolNotFound(name) from None

    def freeze(self) -> None:
        """Mark the registry as fully populated."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def names(self) -> List[str]:
        return list(self._tools)

    def schemas(self) -> Mapping[str, Dict[str, Any]]:
        """Export ``{name: {description, inputSchema}}`` for every registered tool."""
        return {
            name: {"description": spec.description, "inputSchema": spec.input_schema}
            for name, spec in self._tools.items()
        }

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


TOOL_REGISTRY = ToolRegistry()
"""Process-wide registry, frozen once the built-in tools are loaded."""


def register_tool(
    name: str,
    args_schema: type[BaseModel],
    registry: ToolRegistry | None = None,
) -> Callable[[ToolHandler], ToolHandler]:
    """
    Register a handler function as a tool with the given name.

    The function is registered as a decorator, so it can be used like this:
        @register_tool("myTool", MyToolInput)
        def my_tool(data: MyToolInput) -> ContentEnvelope:
            ...

    The handler receives an instance of *args_schema* and must return a
    :class:`ContentEnvelope`.  Its docstring becomes the tool description.

    Raises
    ------
    DuplicateToolName
        If a tool with the same name is already registered.
    """
    target = TOOL_REGISTRY if registry is None else registry

    def wrapper(fn: ToolHandler) -> ToolHandler:
        target.register(
            ToolSpec(
                name=name,
                description=(fn.__doc__ or "").strip(),
                args_schema=args_schema,
                handler=fn,
            )
        )
        return fn

    return wrapper
