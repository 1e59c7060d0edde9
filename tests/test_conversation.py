"""Append-only transcript store."""

import pytest
from pydantic import ValidationError

from salesagent.core.conversation import ConversationStore
from salesagent.core.schema import (
    GroundingSource,
    ToolCall,
    Turn,
    WidgetData,
    WidgetMetadata,
)


@pytest.mark.parametrize("count", [0, 1, 2, 7])
def test_snapshot_length_and_order(count) -> None:
    store = ConversationStore()
    turns = [Turn.user(f"message {i}") for i in range(count)]
    for turn in turns:
        store.append(turn)

    snapshot = store.snapshot()
    assert len(snapshot) == count == len(store)
    assert list(snapshot) == turns


def test_snapshot_reflects_latest_append() -> None:
    store = ConversationStore()
    store.append(Turn.user("first"))
    before = store.snapshot()
    store.append(Turn.error("second"))

    assert len(before) == 1
    assert [turn.content.text for turn in store.snapshot()] == ["first", "second"]


def test_snapshot_is_read_only() -> None:
    store = ConversationStore()
    store.append(Turn.user("hi", tool_calls=[ToolCall(name="getOffers")]))

    snapshot = store.snapshot()
    assert isinstance(snapshot, tuple)
    with pytest.raises(ValidationError):
        snapshot[0].role = "agent"
    with pytest.raises(ValidationError):
        snapshot[0].content.text = "tampered"
    with pytest.raises(ValidationError):
        snapshot[0].content.tool_calls[0].name = "other"
    with pytest.raises(AttributeError):
        snapshot[0].content.tool_calls.append(ToolCall(name="extra"))

    assert store.snapshot()[0].content.text == "hi"
    assert [call.name for call in store.snapshot()[0].content.tool_calls] == ["getOffers"]


def test_append_rejects_non_turns() -> None:
    with pytest.raises(TypeError):
        ConversationStore().append({"role": "user"})


def test_widget_turns_are_read_only() -> None:
    store = ConversationStore()
    store.append(
        Turn(
            role="agent",
            widget=WidgetData(html="<div></div>", metadata=WidgetMetadata(offers=["home_basic"])),
            grounding_sources=[GroundingSource(uri="https://a.example")],
        )
    )

    (turn,) = store.snapshot()
    assert turn.widget.metadata.offers == ("home_basic",)
    assert isinstance(turn.grounding_sources, tuple)
    with pytest.raises(ValidationError):
        turn.widget.html = "<p>tampered</p>"
    with pytest.raises(ValidationError):
        turn.grounding_sources[0].uri = "https://b.example"
