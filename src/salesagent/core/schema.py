"""
Schema definitions for agent <-> orchestrator <-> tool messages.

These data models serve as the contract between the agent boundary, the turn orchestrator, the tool
dispatcher and the display layer.  We keep them separate from runtime logic so they can be imported
anywhere without side-effects.
"""

import json
from typing import (
    Any,
    Dict,
    List,
    Literal,
    Mapping,
    Optional,
    Sequence,
    Tuple,
)

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
)

Role = Literal["user", "agent", "error"]


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------
class Offer(BaseModel):
    """A purchasable package from the catalog."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Stable, unique offer identifier")
    name: str
    price: float = Field(..., ge=0)
    description: str = ""


# ---------------------------------------------------------------------------
# Tool results
# ---------------------------------------------------------------------------
class TextContent(BaseModel):
    """A single text item of a tool result."""

    type: Literal["text"] = "text"
    text: str


class ContentEnvelope(BaseModel):
    """Standard wrapper returned by every tool, on success and on failure."""

    content: List[TextContent] = Field(default_factory=list)

    @classmethod
    def from_text(cls, text: str) -> "ContentEnvelope":
        return cls(content=[TextContent(text=text)])

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "ContentEnvelope":
        """Serialize *data* into the text field (structured results travel as text)."""
        return cls.from_text(json.dumps(data))

    @classmethod
    def error(cls, message: str) -> "ContentEnvelope":
        return cls.from_json({"status": "error", "message": message})

    @property
    def text(self) -> str:
        """All text items joined in order."""
        return "".join(item.text for item in self.content)


class WidgetMetadata(BaseModel):
    """Machine-readable side of a widget."""

    model_config = ConfigDict(frozen=True)

    offers: Tuple[str, ...] = ()


class WidgetData(BaseModel):
    """A rendered UI fragment plus its metadata."""

    model_config = ConfigDict(frozen=True)

    html: str
    metadata: WidgetMetadata = Field(default_factory=WidgetMetadata)


class WidgetPayload(BaseModel):
    """Result of a widget-producing tool."""

    status: Literal["success", "error"]
    widget_data: Optional[WidgetData] = None
    message: Optional[str] = None


# ---------------------------------------------------------------------------
# Conversation
# ---------------------------------------------------------------------------
class ToolCall(BaseModel):
    """A tool invocation, either requested by the agent or triggered by a widget."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Registered tool name")
    args: Dict[str, Any] = Field(default_factory=dict, description="Arguments for the tool")


class GroundingSource(BaseModel):
    """A citation attached to an agent reply (display only)."""

    model_config = ConfigDict(frozen=True)

    uri: str
    title: Optional[str] = None


class TurnContent(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str = ""
    tool_calls: Tuple[ToolCall, ...] = ()


class Turn(BaseModel):
    """One entry of the conversation transcript."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: TurnContent = Field(default_factory=TurnContent)
    widget: Optional[WidgetData] = None
    grounding_sources: Tuple[GroundingSource, ...] = ()

    @classmethod
    def user(cls, text: str, tool_calls: Sequence[ToolCall] = ()) -> "Turn":
        return cls(role="user", content=TurnContent(text=text, tool_calls=tuple(tool_calls)))

    @classmethod
    def error(cls, message: str) -> "Turn":
        return cls(role="error", content=TurnContent(text=message))

    def to_agent_message(self) -> "AgentMessage":
        """Convert to the parts-based shape the agent boundary expects."""
        parts = [AgentPart(text=self.content.text)] if self.content.text else []
        parts.extend(AgentPart(function_call=call) for call in self.content.tool_calls)
        return AgentMessage(role=self.role, content=AgentContent(parts=parts))


# ---------------------------------------------------------------------------
# Agent boundary wire format (camelCase on the wire)
# ---------------------------------------------------------------------------
class WebSource(BaseModel):
    uri: Optional[str] = None
    title: Optional[str] = None


class GroundingAttribution(BaseModel):
    web: Optional[WebSource] = None


class GroundingMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    grounding_attributions: List[GroundingAttribution] = Field(
        default_factory=list, alias="groundingAttributions"
    )


class AgentPart(BaseModel):
    """One part of an agent message: text, a function call and/or grounding metadata."""

    model_config = ConfigDict(populate_by_name=True)

    text: Optional[str] = None
    function_call: Optional[ToolCall] = Field(None, alias="functionCall")
    grounding_metadata: Optional[GroundingMetadata] = Field(None, alias="groundingMetadata")


class AgentContent(BaseModel):
    role: Optional[str] = None
    parts: List[AgentPart] = Field(default_factory=list)


class AgentMessage(BaseModel):
    role: str
    content: AgentContent = Field(default_factory=AgentContent)


class AgentCandidate(BaseModel):
    content: AgentContent


class AgentResponse(BaseModel):
    """Either candidates or an error string."""

    candidates: Optional[List[AgentCandidate]] = None
    error: Optional[str] = None


class ToolOutput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tool_name: str = Field(..., alias="toolName")
    output: Dict[str, Any] = Field(default_factory=dict)


class AgentRequest(BaseModel):
    """Request sent across the agent boundary."""

    model_config = ConfigDict(populate_by_name=True)

    agent_id: str = Field(..., alias="agentId")
    history: List[AgentMessage] = Field(default_factory=list)
    tool_outputs: List[ToolOutput] = Field(default_factory=list, alias="toolOutputs")

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
