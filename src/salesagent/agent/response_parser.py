"""
Parsing of agent boundary responses.

Agent replies arrive as parts (text, function calls, grounding metadata).  Structured widget results
travel inside the text field, so every reply text is decoded into a tagged union: either a widget or
plain prose.
"""

import json
import logging
from dataclasses import (
    dataclass,
    field,
)
from typing import (
    Any,
    List,
    Literal,
    Union,
)

from pydantic import ValidationError

from salesagent.core.schema import (
    AgentContent,
    AgentResponse,
    GroundingSource,
    ToolCall,
    WidgetData,
    WidgetPayload,
)

logger = logging.getLogger(__name__)


class MalformedAgentResponse(ValueError):
    """Raised when an agent response does not have the expected shape."""


@dataclass(frozen=True)
class ParsedAgentMessage:
    """Text, tool calls and grounding sources extracted from one agent message."""

    text: str = ""
    tool_calls: List[ToolCall] = field(default_factory=list)
    grounding_sources: List[GroundingSource] = field(default_factory=list)


@dataclass(frozen=True)
class WidgetReply:
    widget: WidgetData
    kind: Literal["widget"] = "widget"


@dataclass(frozen=True)
class ProseReply:
    text: str
    kind: Literal["prose"] = "prose"


DecodedReply = Union[WidgetReply, ProseReply]


def parse_agent_response(raw: Any) -> AgentResponse:
    """
    Validate a raw agent boundary response.

    Raises
    ------
    MalformedAgentResponse
        If *raw* is not a mapping, fails validation, or carries neither candidates nor an error.
    """
    if not isinstance(raw, dict):
        raise MalformedAgentResponse(f"expected a JSON object, got {type(raw).__name__}")
    try:
        response = AgentResponse.model_validate(raw)
    except ValidationError as exc:
        raise MalformedAgentResponse(f"invalid agent response: {exc}") from exc

    if response.error is None and not response.candidates:
        raise MalformedAgentResponse("agent response has no candidates")
    return response


def parse_agent_message(content: AgentContent) -> ParsedAgentMessage:
    """Concatenate text parts and collect function calls and grounding sources, in order."""
    text = ""
    tool_calls: List[ToolCall] = []
    sources: List[GroundingSource] = []

    for part in content.parts:
        if part.function_call is not None:
            tool_calls.append(part.function_call)
        if part.text:
            text += part.text
        if part.grounding_metadata is not None:
            for attribution in part.grounding_metadata.grounding_attributions:
                web = attribution.web
                if web is None or not web.uri:
                    continue
                sources.append(GroundingSource(uri=web.uri, title=web.title))

    return ParsedAgentMessage(text=text, tool_calls=tool_calls, grounding_sources=sources)


def decode_reply(text: str) -> DecodedReply:
    """
    Decide whether *text* is a widget payload or prose.

    Only a JSON object that validates as a :class:`WidgetPayload` is treated as structured.  A
    successful payload with widget data is a widget; an error payload is shown as its message.
    Anything else, including JSON that merely looks structured, stays prose verbatim.
    """
    stripped = text.strip()
    if not (stripped.startswith("{") and stripped.endswith("}")):
        return ProseReply(text=text)

    try:
        data = json.loads(stripped)
    except json.JSONDecodeError:
        return ProseReply(text=text)
    if not isinstance(data, dict) or "status" not in data:
        return ProseReply(text=text)

    try:
        payload = WidgetPayload.model_validate(data)
    except ValidationError:
        logger.debug("Reply looked structured but is not a widget payload")
        return ProseReply(text=text)

    if payload.status == "success" and payload.widget_data is not None:
        return WidgetReply(widget=payload.widget_data)
    if payload.status == "error" and payload.message:
        return ProseReply(text=payload.message)
    return ProseReply(text=text)
