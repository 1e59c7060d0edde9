"""CLI client for the salesagent API."""

from __future__ import annotations

import logging
import re
from typing import (
    Any,
    Dict,
    List,
    Sequence,
    Tuple,
    cast,
)

import httpx

from salesagent.common import (
    AnsiColors,
    colored_print,
)
from salesagent.config import settings
from salesagent.tools.widget import (
    WidgetAction,
    extract_actions,
)

logger = logging.getLogger(__name__)

_BUY_COMMAND = re.compile(r"^buy\s+(\d+)$", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------
def format_turn(turn: Dict[str, Any]) -> Tuple[List[Tuple[str, AnsiColors]], List[WidgetAction]]:
    """
    Turn a transcript entry into colored lines plus the widget actions it offers.

    Widget turns list one numbered entry per action; the numbers are what ``buy <n>`` refers to.
    """
    role = turn.get("role")
    content = turn.get("content") or {}
    text = content.get("text", "")
    lines: List[Tuple[str, AnsiColors]] = []
    actions: List[WidgetAction] = []

    if role == "error":
        lines.append((f"Error: {text}", AnsiColors.RED))
        return lines, actions

    if role == "user":
        lines.append((f"You: {text}", AnsiColors.BLUE))
        return lines, actions

    lines.append((f"Agent: {text}", AnsiColors.YELLOW))
    widget = turn.get("widget")
    if widget:
        actions = extract_actions(widget.get("html", ""))
        for index, action in enumerate(actions, start=1):
            lines.append((f"  [{index}] {action.label}  (type 'buy {index}')", AnsiColors.GREEN))
    for source in (turn.get("grounding_sources") or [])[:3]:
        title = source.get("title") or "Source Link"
        lines.append((f"  source: {title} {source['uri']}", AnsiColors.GREY))
    if content.get("tool_calls"):
        lines.append(("  ...agent executed a tool call.", AnsiColors.GREY))
    return lines, actions


def parse_buy_command(text: str, actions: Sequence[WidgetAction]) -> WidgetAction | None:
    """Return the action picked by ``buy <n>``, or *None* when *text* is not a buy command."""
    match = _BUY_COMMAND.match(text.strip())
    if not match:
        return None
    index = int(match.group(1))
    if not 1 <= index <= len(actions):
        raise ValueError(f"No widget option {index}; choose 1-{len(actions)}.")
    return actions[index - 1]


# ---------------------------------------------------------------------------
# CLI Client
# ---------------------------------------------------------------------------
def get_user_message() -> Tuple[str, bool]:
    """
    Get a message from the user via standard input.

    Returns:
        Tuple of (user_input, success_flag)
        The success_flag is False if input couldn't be read (e.g., Ctrl+C)
    """
    try:
        user_input = input().strip()
        return user_input, True
    except (EOFError, KeyboardInterrupt):
        return "", False


def call_api(
    method: str, endpoint: str, data: Dict[str, Any] | None = None, max_retries: int = 5
) -> Dict[str, Any]:
    """Send a request to the API and return the JSON body, retrying while the API starts."""
    api_url = f"http://localhost:{settings.API_PORT}{endpoint}"

    for attempt in range(max_retries):
        try:
            with httpx.Client(timeout=settings.AGENT_TIMEOUT + 5.0) as client:
                response = client.request(method, api_url, json=data)
                response.raise_for_status()
                return cast(Dict[str, Any], response.json())
        except httpx.HTTPStatusError as e:
            detail = str(e)
            try:
                detail = e.response.json().get("detail", detail)
            except ValueError:
                pass
            logger.error("API error: %s", detail)
            return {"error": f"API error: {detail}"}
        except httpx.HTTPError as e:
            # On connection refused, retry with exponential backoff
            if isinstance(e, httpx.ConnectError) and attempt < max_retries - 1:
                retry_delay = 0.5 * (2**attempt)  # exponential backoff: 0.5s, 1s, 2s, 4s...
                logger.info(
                    "API not ready yet, retrying in %.1f seconds (attempt %d/%d)...",
                    retry_delay,
                    attempt + 1,
                    max_retries,
                )
                import time  # pylint: disable=import-outside-toplevel

                time.sleep(retry_delay)
                continue

            logger.error("API request error: %s", str(e))
            return {"error": f"Error connecting to API: {str(e)}"}

    return {"error": f"Failed to connect to API after {max_retries} attempts"}


def _show(turns: Sequence[Dict[str, Any]]) -> List[WidgetAction]:
    """Print *turns* and return the actions of the last widget among them."""
    actions: List[WidgetAction] = []
    for turn in turns:
        lines, turn_actions = format_turn(turn)
        for text, color in lines:
            colored_print(text, color)
        if turn_actions:
            actions = turn_actions
    return actions


def run_cli() -> None:
    """Run the CLI client that communicates with the API."""
    session = call_api("POST", "/sessions")
    session_id = session.get("session_id")
    if not session_id:
        colored_print(f"Failed to create a session: {session.get('error')}", AnsiColors.RED)
        return

    colored_print("\nSecurity sales agent - type 'exit' or Ctrl+C to quit", AnsiColors.GREEN)
    turns = session.get("turns", [])
    actions = _show(turns)
    seen = len(turns)

    try:
        while True:
            colored_print("\nYou: ", AnsiColors.BLUE, end="")
            user_msg, ok = get_user_message()
            if not ok or user_msg.lower() in {"exit", "quit"}:
                break
            if not user_msg:
                continue

            try:
                action = parse_buy_command(user_msg, actions)
            except ValueError as exc:
                colored_print(str(exc), AnsiColors.RED)
                continue

            if action is not None:
                response = call_api(
                    "POST",
                    f"/sessions/{session_id}/actions",
                    {"tool_name": action.tool_name, "args": action.args},
                )
            else:
                response = call_api("POST", f"/sessions/{session_id}/messages", {"text": user_msg})

            if "error" in response:
                colored_print(response["error"], AnsiColors.RED)
                continue

            turns = response.get("turns", [])
            # The user's own turn was typed locally; only show what came back
            new_actions = _show([turn for turn in turns[seen:] if turn.get("role") != "user"])
            if new_actions:
                actions = new_actions
            seen = len(turns)
    finally:
        call_api("DELETE", f"/sessions/{session_id}", max_retries=1)


if __name__ == "__main__":
    run_cli()
