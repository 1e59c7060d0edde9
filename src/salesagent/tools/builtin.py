"""Built-in tools exposed to the sales agent."""

import json
import logging
import uuid
from typing import (
    List,
    Optional,
)

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
)

from salesagent.config import settings
from salesagent.core.schema import (
    ContentEnvelope,
    Offer,
)
from salesagent.tools.catalog import (
    find_offer,
    offers_for,
)
from salesagent.tools.registry import register_tool
from salesagent.tools.widget import generate_widget

logger = logging.getLogger(__name__)

MISSING_OFFER_MESSAGE = (
    "An offer_id is required to create a purchase link. "
    "Ask the user which package they would like to buy."
)


# ---------------------------------------------------------------------------
# Input contracts (unknown fields are ignored)
# ---------------------------------------------------------------------------
class GetOffersInput(BaseModel):
    model_config = ConfigDict(extra="ignore")

    category: Optional[str] = Field(None, description="Package category, e.g. 'home' or 'business'")


class CreatePurchaseLinkInput(BaseModel):
    # Advertised as required, but a missing id reaches the tool so it can ask for clarification
    model_config = ConfigDict(extra="ignore", json_schema_extra={"required": ["offer_id"]})

    offer_id: Optional[str] = Field(None, description="Identifier of the offer to buy")


class GenerateOfferWidgetInput(BaseModel):
    model_config = ConfigDict(extra="ignore")

    offers: List[Offer] = Field(..., description="Offers to display, in display order")


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------
@register_tool("getOffers", GetOffersInput)
def get_offers(data: GetOffersInput) -> ContentEnvelope:
    """List the security packages of a category (defaults to home packages)."""
    offers = offers_for(data.category)
    logger.debug("getOffers(category=%r) -> %d offers", data.category, len(offers))
    return ContentEnvelope.from_text(json.dumps([offer.model_dump() for offer in offers]))


@register_tool("createPurchaseLink", CreatePurchaseLinkInput)
def create_purchase_link(data: CreatePurchaseLinkInput) -> ContentEnvelope:
    """Create a one-time purchase link for an offer."""
    offer_id = (data.offer_id or "").strip()
    if not offer_id:
        return ContentEnvelope.error(MISSING_OFFER_MESSAGE)

    url = f"{settings.PURCHASE_BASE_URL.rstrip('/')}/{offer_id.lower()}?ref={uuid.uuid4().hex}"
    result = {"status": "success", "offer_id": offer_id, "purchase_url": url}
    offer = find_offer(offer_id)
    if offer is not None:
        result["offer_name"] = offer.name
    return ContentEnvelope.from_json(result)


@register_tool("generateOfferWidget", GenerateOfferWidgetInput)
def generate_offer_widget(data: GenerateOfferWidgetInput) -> ContentEnvelope:
    """Render a list of offers as an interactive widget with purchase buttons."""
    payload = generate_widget(data.offers)
    return ContentEnvelope.from_text(payload.model_dump_json(exclude_none=True))
