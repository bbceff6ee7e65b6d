from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


class SortKey(str, Enum):
    """Supported sort orders for the working set."""

    PRICE_DESC = "price_desc"
    PRICE_ASC = "price_asc"
    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"
    CMC_ASC = "cmc_asc"
    CMC_DESC = "cmc_desc"
    RARITY_ASC = "rarity_asc"
    RARITY_DESC = "rarity_desc"
    SET_ASC = "set_asc"
    QUANTITY_ASC = "quantity_asc"
    QUANTITY_DESC = "quantity_desc"


DEFAULT_SORT = SortKey.PRICE_DESC


class FilterCriteria(BaseModel):
    """
    Filter options for the working set.

    Empty strings and False flags mean "no constraint". The foil, etched and
    promo flags form one group: when any of them is set a card passes if it
    satisfies at least one of the set flags.
    """

    query: str = Field(default="", description="Free-text search")
    search_mode: Literal["full", "name"] = Field(
        default="full",
        description="full: searchable text; name: card name and set code only",
    )
    type_text: str = Field(default="", description="Type line substring")
    oracle_text: str = Field(default="", description="Oracle text substring")
    rarity: str = Field(default="", description="Exact rarity, case-insensitive")
    mana_cost: str = Field(
        default="",
        description="Mana cost, braces optional (e.g. '2RR' or '{2}{R}{R}'), substring match",
    )

    foil_only: bool = False
    etched_only: bool = False
    promo_only: bool = False
    token_only: bool = False
    favorites_only: bool = False
    hide_ignored: bool = False
