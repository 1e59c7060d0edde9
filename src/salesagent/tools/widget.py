"""
Offer widget rendering.

A widget is a self-contained HTML fragment plus machine-readable metadata.  Every rendered offer
carries an action descriptor (``data-widget-action`` / ``data-widget-args``) naming the tool and the
arguments a display layer must send back through the conversation when the user clicks it.
"""

import json
import logging
from typing import (
    Any,
    Dict,
    List,
    Sequence,
    Tuple,
)

from bs4 import BeautifulSoup
from jinja2 import (
    Environment,
    select_autoescape,
)
from pydantic import (
    BaseModel,
    Field,
)

from salesagent.core.schema import (
    Offer,
    WidgetData,
    WidgetMetadata,
    WidgetPayload,
)

logger = logging.getLogger(__name__)

PURCHASE_ACTION = "createPurchaseLink"
EMPTY_OFFERS_MESSAGE = "No offers were provided, so there is nothing to display."

_env = Environment(autoescape=select_autoescape(default_for_string=True, default=True))
_env.filters["price"] = lambda value: f"${value:,.2f}"

_WIDGET_TEMPLATE = _env.from_string(
    """\
<div class="offer-widget">
{%- for offer, action_args in items %}
  <div class="offer-card" data-offer-id="{{ offer.id }}">
    <h3 class="offer-name">{{ offer.name }}</h3>
    <p class="offer-price">{{ offer.price | price }}/month</p>
    <p class="offer-description">{{ offer.description }}</p>
    <button type="button" class="offer-buy" data-widget-action="{{ action }}" \
data-widget-args="{{ action_args }}">Buy {{ offer.name }}</button>
  </div>
{%- endfor %}
</div>"""
)


class WidgetAction(BaseModel):
    """A callable action descriptor embedded in a widget."""

    tool_name: str
    args: Dict[str, Any] = Field(default_factory=dict)
    label: str = ""


def render_offers(offers: Sequence[Offer]) -> str:
    """Render *offers* in input order; duplicates are rendered twice."""
    items: List[Tuple[Offer, str]] = [
        (offer, json.dumps({"offer_id": offer.id})) for offer in offers
    ]
    return _WIDGET_TEMPLATE.render(items=items, action=PURCHASE_ACTION)


def generate_widget(offers: Sequence[Offer]) -> WidgetPayload:
    """Turn a list of offers into a widget payload."""
    if not offers:
        logger.info("Widget requested without offers")
        return WidgetPayload(status="error", message=EMPTY_OFFERS_MESSAGE)

    widget = WidgetData(
        html=render_offers(offers),
        metadata=WidgetMetadata(offers=[offer.id for offer in offers]),
    )
    return WidgetPayload(status="success", widget_data=widget)


# ---------------------------------------------------------------------------
# Action extraction (display side)
# ---------------------------------------------------------------------------
def extract_actions(html: str) -> List[WidgetAction]:
    """Return the action descriptors embedded in a widget fragment, in document order."""
    actions: List[WidgetAction] = []
    for element in BeautifulSoup(html, "html.parser").select("[data-widget-action]"):
        tool_name = element["data-widget-action"]
        try:
            args = json.loads(element.get("data-widget-args") or "{}")
        except json.JSONDecodeError:
            logger.warning("Skipping widget action '%s' with unreadable arguments", tool_name)
            continue
        actions.append(
            WidgetAction(tool_name=tool_name, args=args, label=element.get_text(strip=True))
        )
    return actions
