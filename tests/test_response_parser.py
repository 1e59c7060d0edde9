"""Parsing agent responses and telling widgets apart from prose."""

import json

import pytest

from salesagent.agent.response_parser import (
    MalformedAgentResponse,
    ProseReply,
    WidgetReply,
    decode_reply,
    parse_agent_message,
    parse_agent_response,
)
from salesagent.core.schema import Offer
from salesagent.tools.widget import generate_widget


def test_message_parts_are_collected_in_order() -> None:
    response = parse_agent_response(
        {
            "candidates": [
                {
                    "content": {
                        "parts": [
                            {"text": "Hello "},
                            {"functionCall": {"name": "getOffers", "args": {"category": "home"}}},
                            {
                                "text": "world",
                                "groundingMetadata": {
                                    "groundingAttributions": [
                                        {"web": {"uri": "https://a.example", "title": "A"}},
                                        {"web": {"uri": "https://b.example"}},
                                        {"web": {"title": "no uri"}},
                                        {},
                                    ]
                                },
                            },
                            {"functionCall": {"name": "generateOfferWidget"}},
                        ]
                    }
                }
            ]
        }
    )

    message = parse_agent_message(response.candidates[0].content)

    assert message.text == "Hello world"
    assert [(c.name, c.args) for c in message.tool_calls] == [
        ("getOffers", {"category": "home"}),
        ("generateOfferWidget", {}),
    ]
    assert [(s.uri, s.title) for s in message.grounding_sources] == [
        ("https://a.example", "A"),
        ("https://b.example", None),
    ]


def test_error_response_is_valid() -> None:
    response = parse_agent_response({"error": "Failed to connect"})

    assert response.error == "Failed to connect"
    assert response.candidates is None


@pytest.mark.parametrize(
    "raw",
    [
        None,
        "text",
        ["candidates"],
        {},
        {"candidates": []},
        {"candidates": [{"no_content": True}]},
        {"candidates": "nope"},
    ],
)
def test_malformed_responses(raw) -> None:
    with pytest.raises(MalformedAgentResponse):
        parse_agent_response(raw)


def test_widget_payload_is_decoded() -> None:
    offer = Offer(id="home_basic", name="Home Basic", price=10, description="")
    text = generate_widget([offer]).model_dump_json(exclude_none=True)

    reply = decode_reply(text)

    assert isinstance(reply, WidgetReply)
    assert reply.kind == "widget"
    assert reply.widget.metadata.offers == ("home_basic",)


@pytest.mark.parametrize(
    "text",
    [
        "Here are some thoughts.",
        "",
        "{not json}",
        '{"answer": 42}',
        '["status", "success"]',
        '{"status": "maybe"}',
        '{"status": "success", "purchase_url": "https://x"}',
    ],
)
def test_everything_else_is_prose(text) -> None:
    reply = decode_reply(text)

    assert isinstance(reply, ProseReply)
    assert reply.text == text


def test_error_payload_shows_its_message() -> None:
    reply = decode_reply(json.dumps({"status": "error", "message": "No offers."}))

    assert reply == ProseReply(text="No offers.")
