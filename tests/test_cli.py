"""Terminal rendering of transcript entries."""

import pytest

from salesagent.client.cli import (
    format_turn,
    parse_buy_command,
)
from salesagent.common import AnsiColors
from salesagent.core.schema import Offer
from salesagent.tools.widget import generate_widget


def _widget_turn() -> dict:
    widget = generate_widget(
        [
            Offer(id="home_basic", name="Home Basic", price=19.99),
            Offer(id="home_pro", name="Home Pro", price=39.99),
        ]
    ).widget_data
    return {
        "role": "agent",
        "content": {"text": "Here are the recommended packages:", "tool_calls": []},
        "widget": widget.model_dump(),
        "grounding_sources": [],
    }


def test_widget_turn_lists_numbered_actions() -> None:
    lines, actions = format_turn(_widget_turn())

    assert lines[0] == ("Agent: Here are the recommended packages:", AnsiColors.YELLOW)
    assert "[2] Buy Home Pro" in lines[2][0]
    assert [action.args["offer_id"] for action in actions] == ["home_basic", "home_pro"]


def test_error_turn_is_red() -> None:
    lines, actions = format_turn({"role": "error", "content": {"text": "down"}})

    assert lines == [("Error: down", AnsiColors.RED)]
    assert actions == []


def test_grounding_sources_are_listed() -> None:
    turn = {
        "role": "agent",
        "content": {"text": "See sources", "tool_calls": []},
        "grounding_sources": [{"uri": "https://a.example", "title": None}],
    }

    lines, _ = format_turn(turn)

    assert lines[1][0].endswith("Source Link https://a.example")


def test_buy_command_selects_action() -> None:
    _, actions = format_turn(_widget_turn())

    assert parse_buy_command("buy 2", actions).args == {"offer_id": "home_pro"}
    assert parse_buy_command("BUY 1 ", actions).args == {"offer_id": "home_basic"}
    assert parse_buy_command("buy something", actions) is None
    with pytest.raises(ValueError):
        parse_buy_command("buy 3", actions)
