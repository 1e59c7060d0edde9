"""
Pydantic models for salesagent API requests and responses.
This module defines the request and response schemas used by the salesagent API.
"""

from typing import (
    Any,
    Dict,
    List,
)

from pydantic import (
    BaseModel,
    Field,
)

from salesagent.core.schema import Turn


# ---------------------------------------------------------------------------
# Pydantic request / response schema
# ---------------------------------------------------------------------------
class SessionResponse(BaseModel):
    """Response with session information."""

    session_id: str
    state: str
    turns: List[Turn] = Field(default_factory=list)


class MessageRequest(BaseModel):
    """Incoming user message."""

    text: str = Field(..., min_length=1, description="User message for the sales agent")


class WidgetActionRequest(BaseModel):
    """Action triggered from a rendered widget."""

    tool_name: str = Field(..., min_length=1, description="Tool named by the widget action")
    args: Dict[str, Any] = Field(default_factory=dict, description="Arguments from the widget")


class TurnResponse(BaseModel):
    """The turn appended in reply, plus the full transcript."""

    session_id: str
    reply: Turn
    turns: List[Turn]


class ToolInvocationRequest(BaseModel):
    """Raw input for a tool, validated by the dispatcher against the tool's schema."""

    input: Any = Field(default_factory=dict)
