"""
Card filter engine.

Pure function over the catalog: no state, no side effects, input order kept.

All criteria are ANDed together, except foil / etched / promo which form
one OR group: with "foil" and "etched" both enabled, a card passes if it is
foil OR etched.
"""

import logging
import re
from collections.abc import Iterable

from binderview.models.card import CatalogCard
from binderview.models.criteria import FilterCriteria

logger = logging.getLogger(__name__)

_MANA_NOISE = re.compile(r"[{}\s]")


def normalize_mana_cost(value: str | None) -> str:
    """Strip braces and whitespace, uppercase: "{2}{R}{R}" -> "2RR"."""
    return _MANA_NOISE.sub("", value or "").upper()


def _matches_query(card: CatalogCard, query: str, search_mode: str) -> bool:
    if search_mode == "name":
        return query in card.name.lower() or query in card.set_code.lower()

    if card.searchable_text:
        return query in card.searchable_text

    # Older catalogs without precomputed search text
    return any(
        query in field.lower()
        for field in (card.name, card.type_line, card.oracle_text, card.set_name)
        if field
    )


def _matches_finish_group(card: CatalogCard, criteria: FilterCriteria) -> bool:
    return (
        (criteria.foil_only and card.is_foil)
        or (criteria.etched_only and card.is_etched)
        or (criteria.promo_only and card.is_promo)
    )


def card_matches(card: CatalogCard, criteria: FilterCriteria) -> bool:
    """Whether a single card satisfies every criterion."""
    # Cheap flag checks first
    if criteria.hide_ignored and card.is_ignored:
        return False
    if criteria.favorites_only and not card.is_favorite:
        return False
    if criteria.token_only and not card.is_token:
        return False
    if (criteria.foil_only or criteria.etched_only or criteria.promo_only) and (
        not _matches_finish_group(card, criteria)
    ):
        return False

    rarity = criteria.rarity.strip().lower()
    if rarity and card.rarity.lower() != rarity:
        return False

    # Substring checks
    query = criteria.query.strip().lower()
    if query and not _matches_query(card, query, criteria.search_mode):
        return False

    type_text = criteria.type_text.strip().lower()
    if type_text and type_text not in card.type_line.lower():
        return False

    oracle_text = criteria.oracle_text.strip().lower()
    if oracle_text and oracle_text not in card.oracle_text.lower():
        return False

    mana_cost = normalize_mana_cost(criteria.mana_cost)
    if mana_cost and mana_cost not in normalize_mana_cost(card.mana_cost):
        return False

    return True


def filter_cards(
    cards: Iterable[CatalogCard], criteria: FilterCriteria | None = None
) -> list[CatalogCard]:
    """
    Return the cards matching the criteria, in their original order.

    Args:
        cards: Cards to filter (usually the whole catalog)
        criteria: Filter options; None or default criteria match everything

    Returns:
        New list of matching cards.
    """
    if criteria is None:
        return list(cards)

    results = [card for card in cards if card_matches(card, criteria)]
    logger.debug("Filtering complete, %d cards matched", len(results))
    return results
