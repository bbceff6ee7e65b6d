"""
Card sort engine.

Every sort is stable and returns a new list, so sorting an already sorted
list by the same key leaves it unchanged.
"""

import logging
import re
from collections.abc import Callable, Iterable
from typing import Any

from binderview.models.card import CatalogCard
from binderview.models.criteria import SortKey

logger = logging.getLogger(__name__)

RARITY_RANK: dict[str, int] = {"common": 1, "uncommon": 2, "rare": 3, "mythic": 4}

# Tokens, "special", "bonus" and anything unknown sort after mythic
UNRANKED = 99

_LEADING_DIGITS = re.compile(r"\d+")


def rarity_rank(rarity: str) -> int:
    return RARITY_RANK.get(rarity.lower(), UNRANKED)


def collector_number_key(collector_number: str) -> tuple[int, str]:
    """
    Sort key for collector numbers: the first run of digits, then the full string.

    "2" < "10" < "10a" < "10b"; numbers without digits count as 0.
    """
    match = _LEADING_DIGITS.search(collector_number or "")
    number = int(match.group()) if match else 0
    return number, (collector_number or "").lower()


def _name_key(card: CatalogCard) -> tuple[str, str]:
    return card.name.casefold(), card.name


# key -> (sort key function, descending)
_SORTS: dict[SortKey, tuple[Callable[[CatalogCard], Any], bool]] = {
    SortKey.PRICE_DESC: (lambda c: c.effective_price, True),
    SortKey.PRICE_ASC: (lambda c: c.effective_price, False),
    SortKey.NAME_ASC: (_name_key, False),
    SortKey.NAME_DESC: (_name_key, True),
    SortKey.CMC_ASC: (lambda c: c.cmc or 0, False),
    SortKey.CMC_DESC: (lambda c: c.cmc or 0, True),
    SortKey.RARITY_ASC: (lambda c: rarity_rank(c.rarity), False),
    SortKey.RARITY_DESC: (lambda c: rarity_rank(c.rarity), True),
    SortKey.SET_ASC: (
        lambda c: (c.set_code.lower(), collector_number_key(c.collector_number)),
        False,
    ),
    SortKey.QUANTITY_ASC: (lambda c: c.owned_quantity, False),
    SortKey.QUANTITY_DESC: (lambda c: c.owned_quantity, True),
}


def sort_cards(cards: Iterable[CatalogCard], key: SortKey | str | None) -> list[CatalogCard]:
    """
    Sort cards by the given key.

    Price sorts use my price, falling back to market price. Name sorts are
    case-insensitive. set_asc orders by set code, then by the numeric part
    of the collector number, then by the full collector number. An unknown
    key returns the cards in their current order.

    Args:
        cards: Cards to sort
        key: A SortKey or its string value

    Returns:
        New sorted list.
    """
    try:
        sort_key = SortKey(key)
    except ValueError:
        logger.debug("Unknown sort key %r, keeping current order", key)
        return list(cards)

    key_func, descending = _SORTS[sort_key]
    return sorted(cards, key=key_func, reverse=descending)
