from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel


class Finish(str, Enum):
    """Physical printing variant of a card."""

    NORMAL = "normal"
    FOIL = "foil"
    ETCHED = "etched"

    @classmethod
    def parse(cls, value: Any) -> "Finish":
        """Parse an export value, treating anything unrecognized as normal."""
        text = str(value or "").strip().lower()
        for finish in cls:
            if finish.value == text:
                return finish
        return cls.NORMAL


_TEXT_FIELDS = (
    "name",
    "set_code",
    "collector_number",
    "searchable_text",
    "set_name",
    "rarity",
    "type_line",
    "oracle_text",
    "mana_cost",
    "layout",
    "language",
)


class CatalogCard(BaseModel):
    """
    One owned printing in the catalog.

    Serialized with camelCase field names. Unknown fields are ignored on load
    and missing or null optional fields fall back to their defaults, so every
    consumer can rely on the attribute being present.

    The three runtime overlays (is_favorite, is_ignored, current_quantity) are
    never written to the catalog file. They are set by the preference store.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: str
    name: str = ""
    set_code: str = Field(default="", alias="set")
    collector_number: str = ""
    quantity: int = 0

    is_foil: bool = False
    is_etched: bool = False
    is_promo: bool = False
    is_token: bool = False

    market_price: float = 0.0
    my_price: float | None = None
    cmc: float = 0.0

    searchable_text: str = ""
    image_url: str | None = None
    set_name: str = ""
    rarity: str = ""
    type_line: str = ""
    oracle_text: str = ""
    mana_cost: str = ""
    colors: list[str] = Field(default_factory=list)
    color_identity: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    layout: str = ""
    language: str = "en"
    legalities: dict[str, str] = Field(default_factory=dict)

    reference_id: str | None = None
    oracle_id: str | None = None
    reprint: bool = False
    variation: bool = False

    # Runtime overlays, owned by the preference store
    is_favorite: bool = Field(default=False, exclude=True)
    is_ignored: bool = Field(default=False, exclude=True)
    current_quantity: int | None = Field(default=None, exclude=True)

    @field_validator(*_TEXT_FIELDS, mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    @field_validator("market_price", "cmc", "quantity", mode="before")
    @classmethod
    def _none_to_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("colors", "color_identity", "keywords", "legalities", mode="before")
    @classmethod
    def _none_to_empty_collection(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return {} if info.field_name == "legalities" else []
        return value

    @property
    def finish(self) -> Finish:
        if self.is_etched:
            return Finish.ETCHED
        if self.is_foil:
            return Finish.FOIL
        return Finish.NORMAL

    @property
    def effective_price(self) -> float:
        """My price, falling back to market price when no my price is set."""
        return self.my_price if self.my_price is not None else self.market_price

    @property
    def owned_quantity(self) -> int:
        """Quantity currently owned, honoring any user override."""
        if self.current_quantity is not None:
            return self.current_quantity
        return self.quantity
