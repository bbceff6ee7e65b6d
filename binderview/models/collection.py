from dataclasses import dataclass, field
from typing import Any

from binderview.models.card import Finish

DEFAULT_LANGUAGE = "en"


@dataclass(frozen=True, slots=True)
class CollectionEntry:
    """
    One row of the user's collection export.

    Attributes:
        name: Card name as written in the export
        set_code: Set code (e.g., "MH2", "LEA")
        collector_number: Raw collector number, may carry marker glyphs ("100★")
        quantity: Copies owned, always > 0
        finish: normal, foil or etched
        language: Scryfall language code
        promo: Promo flag from the export
        my_price: Explicit price override from the export, if any
        row: The source row, kept for the unmatched report
    """

    name: str
    set_code: str
    collector_number: str
    quantity: int
    finish: Finish = Finish.NORMAL
    language: str = DEFAULT_LANGUAGE
    promo: bool = False
    my_price: str | None = None
    row: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)


@dataclass(frozen=True, slots=True)
class UnmatchedEntry:
    """A collection row that found no reference record."""

    reason: str
    entry: CollectionEntry

    def to_dict(self) -> dict[str, Any]:
        return {"reason": self.reason, "sourceRow": self.entry.row}
