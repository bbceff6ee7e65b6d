"""
Price resolution for catalog cards.

Scryfall publishes one USD price per finish (usd, usd_foil, usd_etched), any
of which may be null. These rules pick the single market price shown for an
owned printing.
"""

import logging
import math
from collections.abc import Mapping
from typing import Any

from binderview.config import settings
from binderview.models.card import Finish

logger = logging.getLogger(__name__)

PRICE_FIELDS: dict[Finish, str] = {
    Finish.NORMAL: "usd",
    Finish.FOIL: "usd_foil",
    Finish.ETCHED: "usd_etched",
}

# Fallback order when the requested finish has no price
FALLBACK_ORDER = (Finish.NORMAL, Finish.FOIL, Finish.ETCHED)


def _parse_price(value: Any) -> float:
    """Parse a Scryfall price string, returning 0 for absent or invalid values."""
    if value is None or value == "":
        return 0.0
    try:
        price = float(value)
    except (TypeError, ValueError):
        logger.debug("Unparseable price %r treated as 0", value)
        return 0.0
    return price if math.isfinite(price) else 0.0


def resolve_market_price(
    prices: Mapping[str, Any] | None,
    finish: Finish = Finish.NORMAL,
    promo: bool = False,
) -> float:
    """
    Resolve a single market price for a printing.

    Rules, in order:
        1. No price data at all -> 0 (normal for tokens).
        2. The price for the requested finish, if present.
        3. Otherwise the first present of usd, usd_foil, usd_etched.
        4. Promo printings that ended up on the normal price take the foil
           price instead, when one exists.
        5. The chosen value is parsed as a float; failure or absence -> 0.

    Args:
        prices: Scryfall "prices" object
        finish: Finish of the owned copy
        promo: Whether the printing is a promo

    Returns:
        Market price, 0.0 when unknown.
    """
    if not prices:
        return 0.0

    normal = prices.get(PRICE_FIELDS[Finish.NORMAL])
    foil = prices.get(PRICE_FIELDS[Finish.FOIL])

    price = prices.get(PRICE_FIELDS[finish])
    if price is None:
        for fallback in FALLBACK_ORDER:
            price = prices.get(PRICE_FIELDS[fallback])
            if price is not None:
                break

    if promo and foil is not None and price == normal:
        price = foil

    return _parse_price(price)


def compute_my_price(
    market_price: float,
    override: Any = None,
    multiplier: float | None = None,
) -> float:
    """
    Resolve the asking price for a card.

    An explicit override from the collection export wins when it parses as a
    finite number. Otherwise the market price is discounted by the multiplier and
    rounded to cents.
    """
    if override is not None and str(override).strip() != "":
        try:
            value = float(override)
        except (TypeError, ValueError):
            logger.warning("Ignoring unparseable price override %r", override)
        else:
            if math.isfinite(value):
                return value
            logger.warning("Ignoring non-finite price override %r", override)

    if multiplier is None:
        multiplier = settings.my_price_multiplier
    return round(market_price * multiplier, 2)
