"""
Agent boundary for salesagent.

This module is the only place that talks to the agent that decides *when* to call tools.  Everything
else (orchestrator, tools, display) treats it as an opaque request/response call.

We support two back-ends out of the box:

1. **HTTP** - posts the conversation to a remote agent endpoint (``settings.AGENT_ENDPOINT``).
2. **Local** - a deterministic keyword agent that runs the built-in tools in-process.  Useful for
   demos and tests without a model behind the endpoint.

Additional back-ends can be added by subclassing :class:`BaseAgentClient` and registering via
:func:`register_agent`.
"""

import json
import logging
import re
from abc import (
    ABC,
    abstractmethod,
)
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Sequence,
    Type,
)

import httpx

from salesagent.agent.tool_executor import dispatch
from salesagent.config import settings
from salesagent.core.schema import (
    AgentCandidate,
    AgentContent,
    AgentMessage,
    AgentPart,
    AgentRequest,
    AgentResponse,
    ToolCall,
)
from salesagent.tools import ToolRegistry

logger = logging.getLogger(__name__)


class AgentBoundaryError(RuntimeError):
    """Raised when the agent cannot be reached or answers with something unreadable."""


# ---------------------------------------------------------------------------
# Registry helpers
# ---------------------------------------------------------------------------
_AGENT_REGISTRY: dict[str, Type["BaseAgentClient"]] = {}


def register_agent(name: str) -> Callable:
    """Decorator to register an agent client class under *name*."""

    def wrapper(cls: Type["BaseAgentClient"]) -> Type["BaseAgentClient"]:
        _AGENT_REGISTRY[name] = cls
        return cls

    return wrapper


def load_agent(name: str | None = None) -> "BaseAgentClient":
    """
    Factory that returns an instantiated agent client.

    Fallback order:
    1. *name* arg
    2. ``settings.AGENT_BACKEND`` env option
    """

    target = name or settings.AGENT_BACKEND
    cls = _AGENT_REGISTRY.get(target.lower())
    if cls is None:
        raise ValueError(f"Agent backend '{target}' is not registered.")
    return cls()


# ---------------------------------------------------------------------------
# Base class
# ---------------------------------------------------------------------------
class BaseAgentClient(ABC):
    """Abstract agent boundary: conversation in, raw agent response out."""

    @abstractmethod
    async def send(self, request: AgentRequest) -> Mapping[str, Any]:
        """Return the raw response (``{"candidates": [...]}`` or ``{"error": "..."}``)."""


# ---------------------------------------------------------------------------
# Concrete clients
# ---------------------------------------------------------------------------
@register_agent("http")
class HttpAgentClient(BaseAgentClient):
    """Remote agent reached over HTTP with httpx."""

    def __init__(
        self,
        endpoint: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.endpoint = endpoint or settings.AGENT_ENDPOINT
        self.timeout = timeout if timeout is not None else settings.AGENT_TIMEOUT
        self._transport = transport

    async def send(self, request: AgentRequest) -> Mapping[str, Any]:
        payload = request.to_wire()
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(self.endpoint, json=payload)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPError as e:
            logger.error("Agent request error: %s", str(e))
            raise AgentBoundaryError(f"Error calling agent endpoint: {str(e)}") from e
        except ValueError as e:
            logger.error("Agent returned a non-JSON body: %s", str(e))
            raise AgentBoundaryError("Agent returned a non-JSON body") from e

        logger.debug("Agent response: %s", data)
        return data


HELP_REPLY = (
    "I can help you compare our security packages. "
    "Try asking about 'home' or 'business' packages."
)

_CATEGORY_WORDS = {
    "home": "home",
    "house": "home",
    "apartment": "home",
    "family": "home",
    "business": "business",
    "office": "business",
    "company": "business",
    "store": "business",
}
_SHOPPING_WORDS = {"offer", "offers", "package", "packages", "plan", "plans", "price", "prices"}


def _latest_user_message(history: Sequence[AgentMessage]) -> Optional[AgentMessage]:
    for message in reversed(history):
        if message.role == "user":
            return message
    return None


def _match_category(text: str) -> Optional[str]:
    """Return a category, ``""`` for a generic shopping request, or *None*."""
    words = re.findall(r"[a-z]+", text.lower())
    for word in words:
        if word in _CATEGORY_WORDS:
            return _CATEGORY_WORDS[word]
    if any(word in _SHOPPING_WORDS for word in words):
        return ""
    return None


def _describe_result(text: str) -> str:
    """Turn a tool result into a sentence for the user."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return text
    if not isinstance(data, dict):
        return text
    if data.get("status") == "error":
        return data.get("message") or text
    if "purchase_url" in data:
        label = data.get("offer_name") or data.get("offer_id")
        return f"Here is your secure purchase link for {label}: {data['purchase_url']}"
    return text


def _reply(parts: List[AgentPart]) -> Dict[str, Any]:
    response = AgentResponse(
        candidates=[AgentCandidate(content=AgentContent(role="model", parts=parts))]
    )
    return response.model_dump(mode="json", by_alias=True, exclude_none=True)


@register_agent("local")
class LocalAgent(BaseAgentClient):
    """Deterministic keyword agent that calls the built-in tools itself."""

    def __init__(self, registry: ToolRegistry | None = None) -> None:
        self._registry = registry

    async def send(self, request: AgentRequest) -> Mapping[str, Any]:
        message = _latest_user_message(request.history)
        if message is None:
            return _reply([AgentPart(text=HELP_REPLY)])

        calls = [part.function_call for part in message.content.parts if part.function_call]
        if calls:
            return self._run_actions(calls)

        text = "".join(part.text or "" for part in message.content.parts)
        category = _match_category(text)
        if category is None:
            return _reply([AgentPart(text=HELP_REPLY)])
        return self._recommend(category)

    def _run_actions(self, calls: List[ToolCall]) -> Dict[str, Any]:
        parts: List[AgentPart] = []
        sentences: List[str] = []
        for call in calls:
            envelope = dispatch(call.name, call.args, self._registry)
            parts.append(AgentPart(function_call=call))
            sentences.append(_describe_result(envelope.text))
        parts.append(AgentPart(text="\n".join(sentences)))
        return _reply(parts)

    def _recommend(self, category: str) -> Dict[str, Any]:
        offers_call = ToolCall(name="getOffers", args={"category": category} if category else {})
        offers_result = dispatch(offers_call.name, offers_call.args, self._registry)
        try:
            offers = json.loads(offers_result.text)
        except json.JSONDecodeError:
            offers = None
        if not isinstance(offers, list):
            logger.warning("getOffers did not return a list: %s", offers_result.text)
            return _reply(
                [AgentPart(function_call=offers_call), AgentPart(text=offers_result.text)]
            )

        widget_call = ToolCall(name="generateOfferWidget", args={"offers": offers})
        widget_result = dispatch(widget_call.name, widget_call.args, self._registry)
        return _reply(
            [
                AgentPart(function_call=offers_call),
                AgentPart(function_call=widget_call),
                AgentPart(text=widget_result.text),
            ]
        )
