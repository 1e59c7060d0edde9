"""Widget rendering and action extraction."""

from salesagent.core.schema import Offer
from salesagent.tools.widget import (
    EMPTY_OFFERS_MESSAGE,
    PURCHASE_ACTION,
    extract_actions,
    generate_widget,
    render_offers,
)

BASIC = Offer(id="home_basic", name="Home Basic Security", price=19.99, description="Sensors")
PRO = Offer(id="home_pro", name="Home Pro Security", price=1249.5, description="Cameras")


def test_empty_offers_is_an_error() -> None:
    payload = generate_widget([])

    assert payload.status == "error"
    assert payload.widget_data is None
    assert payload.message == EMPTY_OFFERS_MESSAGE


def test_metadata_follows_input_order() -> None:
    payload = generate_widget([PRO, BASIC])

    assert payload.status == "success"
    assert payload.widget_data.metadata.offers == ("home_pro", "home_basic")
    html = payload.widget_data.html
    assert html.index("Home Pro Security") < html.index("Home Basic Security")


def test_duplicates_are_rendered_twice() -> None:
    payload = generate_widget([BASIC, BASIC])

    assert payload.widget_data.metadata.offers == ("home_basic", "home_basic")
    assert payload.widget_data.html.count('data-offer-id="home_basic"') == 2


def test_rendering_is_deterministic_and_formats_prices() -> None:
    html = render_offers([BASIC, PRO])

    assert html == render_offers([BASIC, PRO])
    assert "$19.99" in html
    assert "$1,249.50" in html


def test_offer_text_is_escaped() -> None:
    sneaky = Offer(id="x1", name="<script>alert(1)</script>", price=1, description="a & b")
    html = render_offers([sneaky])

    assert "<script>" not in html
    assert "&lt;script&gt;" in html
    assert "a &amp; b" in html


def test_actions_point_back_to_purchase_tool() -> None:
    actions = extract_actions(generate_widget([BASIC, PRO]).widget_data.html)

    assert [action.tool_name for action in actions] == [PURCHASE_ACTION, PURCHASE_ACTION]
    assert [action.args for action in actions] == [{"offer_id": "home_basic"}, {"offer_id": "home_pro"}]
    assert actions[0].label == "Buy Home Basic Security"


def test_extract_actions_skips_unreadable_arguments() -> None:
    html = (
        '<button data-widget-action="createPurchaseLink" data-widget-args="{oops">A</button>'
        '<button data-widget-action="createPurchaseLink" data-widget-args=\'{"offer_id": "b"}\'>B</button>'
        "<p>no action here</p>"
    )

    actions = extract_actions(html)

    assert len(actions) == 1
    assert actions[0].args == {"offer_id": "b"}
    assert actions[0].label == "B"
