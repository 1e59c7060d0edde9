"""
Subscription channel for widget-triggered actions.

Rendered widgets carry action descriptors.  When the display layer sees one triggered it emits it on
the conversation's channel; the orchestrator subscribed to that channel turns it into a new turn.
"""

import logging
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
)

from salesagent.core.schema import Turn

logger = logging.getLogger(__name__)

WidgetActionHandler = Callable[[str, Dict[str, Any]], Awaitable[Turn]]


class ChannelClosed(RuntimeError):
    """Raised when an action is emitted with nobody subscribed."""


class ChannelBusy(RuntimeError):
    """Raised when subscribing to a channel that already has a subscriber."""


class WidgetActionChannel:
    """Single-subscriber channel from the display layer to an orchestrator."""

    def __init__(self) -> None:
        self._handler: WidgetActionHandler | None = None

    @property
    def subscribed(self) -> bool:
        return self._handler is not None

    def subscribe(self, handler: WidgetActionHandler) -> Callable[[], None]:
        """Attach *handler* and return a callable that detaches it again."""
        if self._handler is not None:
            raise ChannelBusy("widget action channel already has a subscriber")
        self._handler = handler

        def unsubscribe() -> None:
            if self._handler is handler:
                self._handler = None

        return unsubscribe

    async def emit(self, tool_name: str, args: Dict[str, Any] | None = None) -> Turn:
        handler = self._handler
        if handler is None:
            raise ChannelClosed(f"no subscriber for widget action '{tool_name}'")
        logger.debug("Widget action %s(%s)", tool_name, args)
        return await handler(tool_name, dict(args or {}))
