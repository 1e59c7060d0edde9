"""Shared fixtures: a private tool registry and a scripted agent boundary."""

import asyncio
from typing import (
    Any,
    Dict,
    List,
    Mapping,
)

import pytest
from pydantic import BaseModel

from salesagent.agent.agent_client import BaseAgentClient
from salesagent.core.schema import (
    AgentRequest,
    ContentEnvelope,
)
from salesagent.tools import (
    ToolRegistry,
    register_tool,
)


class AddInput(BaseModel):
    a: int
    b: int


class NoInput(BaseModel):
    pass


@pytest.fixture
def registry() -> ToolRegistry:
    """A registry with stub tools (used only for tests)."""
    reg = ToolRegistry()

    @register_tool("add", AddInput, registry=reg)
    def _add(data: AddInput) -> ContentEnvelope:
        """Return the sum of two integers."""
        return ContentEnvelope.from_text(str(data.a + data.b))

    @register_tool("boom", NoInput, registry=reg)
    def _boom(data: NoInput) -> ContentEnvelope:
        raise RuntimeError("kaboom")

    @register_tool("sloppy", NoInput, registry=reg)
    def _sloppy(data: NoInput) -> Any:
        return "not an envelope"

    reg.freeze()
    return reg


def text_response(*parts: Dict[str, Any]) -> Dict[str, Any]:
    """Build a ``{"candidates": [...]}`` agent response from raw parts."""
    return {"candidates": [{"content": {"role": "model", "parts": list(parts)}}]}


class ScriptedAgent(BaseAgentClient):
    """
    Agent boundary stub returning queued responses.

    A queued exception is raised instead of returned.  When *gate* is set, each call waits on it,
    which keeps the orchestrator in its awaiting state for as long as a test needs.
    """

    def __init__(self, *responses: Any, gate: asyncio.Event | None = None) -> None:
        self.responses: List[Any] = list(responses)
        self.requests: List[AgentRequest] = []
        self.gate = gate

    async def send(self, request: AgentRequest) -> Mapping[str, Any]:
        self.requests.append(request)
        if self.gate is not None:
            await self.gate.wait()
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response
