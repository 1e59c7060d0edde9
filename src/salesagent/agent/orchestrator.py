"""Turn orchestration for one conversation."""

from __future__ import annotations

import asyncio
import enum
import json
import logging
from typing import (
    Any,
    Callable,
    Dict,
    List,
)

from salesagent.agent.agent_client import (
    AgentBoundaryError,
    BaseAgentClient,
)
from salesagent.agent.response_parser import (
    MalformedAgentResponse,
    WidgetReply,
    decode_reply,
    parse_agent_message,
    parse_agent_response,
)
from salesagent.config import settings
from salesagent.core.conversation import ConversationStore
from salesagent.core.events import WidgetActionChannel
from salesagent.core.schema import (
    AgentRequest,
    ToolCall,
    ToolOutput,
    Turn,
    TurnContent,
)

logger = logging.getLogger(__name__)

WIDGET_CONFIRMATION = "Here are the recommended packages:"
AGENT_UNAVAILABLE = "Failed to connect to the agent service."
UNEXPECTED_ERROR = "An unexpected error occurred during communication."


class OrchestratorState(enum.Enum):
    IDLE = "idle"
    AWAITING_AGENT = "awaiting_agent"


class ConversationBusy(RuntimeError):
    """Raised when a turn is submitted while an agent call is in flight."""


def describe_widget_action(tool_name: str, args: Dict[str, Any]) -> str:
    return f"User clicked widget button: {tool_name}({json.dumps(args)})"


class TurnOrchestrator:
    """
    Single writer of a conversation.

    Every request (typed text or a widget action) appends a user turn, calls the agent boundary with
    the full transcript and appends exactly one response turn: an agent turn, possibly tagged with a
    widget, or an error turn.  At most one agent call is in flight; submissions made meanwhile raise
    :class:`ConversationBusy` and leave the transcript untouched.
    """

    def __init__(
        self,
        agent: BaseAgentClient,
        store: ConversationStore | None = None,
        greeting: str | None = None,
        timeout: float | None = None,
        agent_id: str | None = None,
    ) -> None:
        self._agent = agent
        self._store = store if store is not None else ConversationStore()
        self._timeout = timeout
        self._agent_id = agent_id or settings.AGENT_ID
        self._state = OrchestratorState.IDLE
        self._unsubscribe: Callable[[], None] | None = None
        if greeting:
            self._store.append(Turn(role="agent", content=TurnContent(text=greeting)))

    @property
    def state(self) -> OrchestratorState:
        return self._state

    @property
    def store(self) -> ConversationStore:
        return self._store

    # ------------------------------------------------------------------ #
    # Inputs
    # ------------------------------------------------------------------ #
    async def submit(self, text: str) -> Turn:
        """Handle a message typed by the user and return the appended response turn."""
        if not text or not text.strip():
            raise ValueError("message text must not be empty")
        return await self._run_turn(Turn.user(text), [])

    async def widget_action(self, tool_name: str, args: Dict[str, Any]) -> Turn:
        """Handle an action triggered from a rendered widget."""
        call = ToolCall(name=tool_name, args=args)
        request_turn = Turn.user(describe_widget_action(tool_name, args), tool_calls=[call])
        pending = ToolOutput(tool_name=tool_name, output={"status": "pending"})
        return await self._run_turn(request_turn, [pending])

    # ------------------------------------------------------------------ #
    # Display layer wiring
    # ------------------------------------------------------------------ #
    def bind(self, channel: WidgetActionChannel) -> None:
        """Receive widget actions emitted on *channel* until :meth:`close`."""
        self.close()
        self._unsubscribe = channel.subscribe(self.widget_action)

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    # ------------------------------------------------------------------ #
    # State machine
    # ------------------------------------------------------------------ #
    async def _run_turn(self, request_turn: Turn, tool_outputs: List[ToolOutput]) -> Turn:
        if self._state is not OrchestratorState.IDLE:
            raise ConversationBusy("an agent call is already in flight for this conversation")
        self._state = OrchestratorState.AWAITING_AGENT
        try:
            self._store.append(request_turn)
            response_turn = await self._ask_agent(tool_outputs)
            self._store.append(response_turn)
            return response_turn
        finally:
            self._state = OrchestratorState.IDLE

    async def _ask_agent(self, tool_outputs: List[ToolOutput]) -> Turn:
        request = AgentRequest(
            agent_id=self._agent_id,
            history=[turn.to_agent_message() for turn in self._store.snapshot()],
            tool_outputs=tool_outputs,
        )
        try:
            if self._timeout is None:
                raw = await self._agent.send(request)
            else:
                raw = await asyncio.wait_for(self._agent.send(request), self._timeout)
            response = parse_agent_response(raw)
        except asyncio.TimeoutError:
            logger.error("Agent call timed out after %.1fs", self._timeout)
            return Turn.error(AGENT_UNAVAILABLE)
        except AgentBoundaryError as exc:
            logger.error("Error calling agent: %s", exc)
            return Turn.error(AGENT_UNAVAILABLE)
        except MalformedAgentResponse as exc:
            logger.error("Malformed agent response: %s", exc)
            return Turn.error(UNEXPECTED_ERROR)
        except Exception:  # pylint: disable=broad-except
            logger.exception("Unexpected failure during agent call")
            return Turn.error(UNEXPECTED_ERROR)

        if response.error is not None:
            logger.warning("Agent returned an error: %s", response.error)
            return Turn.error(response.error)

        if not response.candidates:
            logger.error("Agent response carried neither candidates nor an error")
            return Turn.error(UNEXPECTED_ERROR)

        message = parse_agent_message(response.candidates[0].content)
        reply = decode_reply(message.text)
        if isinstance(reply, WidgetReply):
            text = WIDGET_CONFIRMATION
            widget = reply.widget
        else:
            text = reply.text
            widget = None

        return Turn(
            role="agent",
            content=TurnContent(text=text, tool_calls=message.tool_calls),
            widget=widget,
            grounding_sources=message.grounding_sources,
        )
