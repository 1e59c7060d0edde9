"""
Tools for salesagent.

Importing this package registers the built-in tools into :data:`TOOL_REGISTRY` and freezes it, so
the registry is fully populated before any dispatch can run.
"""

from salesagent.tools.registry import (
    TOOL_REGISTRY,
    DuplicateToolName,
    RegistryFrozen,
    ToolNotFound,
    ToolRegistry,
    ToolSpec,
    register_tool,
)
from salesagent.tools import builtin  # noqa: F401  # registers the built-in tools

TOOL_REGISTRY.freeze()

__all__ = [
    "TOOL_REGISTRY",
    "DuplicateToolName",
    "RegistryFrozen",
    "ToolNotFound",
    "ToolRegistry",
    "ToolSpec",
    "register_tool",
]
