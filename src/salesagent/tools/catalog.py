"""Mock catalog of security packages, grouped by category."""

import logging
from types import MappingProxyType
from typing import (
    Mapping,
    Tuple,
)

from salesagent.config import settings
from salesagent.core.schema import Offer

logger = logging.getLogger(__name__)

CATALOG: Mapping[str, Tuple[Offer, ...]] = MappingProxyType(
    {
        "home": (
            Offer(
                id="home_basic",
                name="Home Basic Security",
                price=19.99,
                description="24/7 monitoring with door and window sensors for apartments.",
            ),
            Offer(
                id="home_pro",
                name="Home Pro Security",
                price=39.99,
                description="Indoor and outdoor cameras, smart locks and priority response.",
            ),
        ),
        "business": (
            Offer(
                id="business_standard",
                name="Business Standard Security",
                price=99.00,
                description="Access control and monitored alarms for a single site.",
            ),
            Offer(
                id="business_enterprise",
                name="Business Enterprise Security",
                price=249.00,
                description="Multi-site surveillance, on-call guards and a dedicated manager.",
            ),
        ),
    }
)


def resolve_category(category: str | None, default: str | None = None) -> str:
    """
    Normalize *category* and map it onto a known catalog key.

    Absent or unrecognized values fall back to *default* (``settings.DEFAULT_CATEGORY`` when not
    given).  This is a policy, not an error.
    """
    fallback = (default or settings.DEFAULT_CATEGORY).strip().lower()
    if category is not None:
        key = category.strip().lower()
        if key in CATALOG:
            return key
        logger.debug("Unknown category %r, falling back to '%s'", category, fallback)
    return fallback


def offers_for(category: str | None) -> Tuple[Offer, ...]:
    """Return the offers of the resolved category, in catalog order."""
    return CATALOG[resolve_category(category)]


def find_offer(offer_id: str) -> Offer | None:
    for offers in CATALOG.values():
        for offer in offers:
            if offer.id == offer_id:
                return offer
    return None
