import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from binderview.models.card import CatalogCard

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_bulk_path() -> Path:
    return FIXTURES / "scryfall_sample.json"


@pytest.fixture
def sample_collection_path() -> Path:
    return FIXTURES / "collection.csv"


@pytest.fixture
def sample_records(sample_bulk_path: Path) -> list[dict[str, Any]]:
    with open(sample_bulk_path, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def make_card() -> Callable[..., CatalogCard]:
    """Factory for catalog cards with sensible defaults."""

    def _make(card_id: str, **overrides: Any) -> CatalogCard:
        values: dict[str, Any] = {
            "id": card_id,
            "name": card_id.title(),
            "set_code": "tst",
            "collector_number": "1",
            "quantity": 1,
            "rarity": "common",
        }
        values.update(overrides)
        return CatalogCard(**values)

    return _make


@pytest.fixture
def sample_cards(make_card: Callable[..., CatalogCard]) -> list[CatalogCard]:
    """A small mixed catalog: normal, foil, etched, promo and token copies."""
    return [
        make_card(
            "bolt",
            name="Lightning Bolt",
            set_code="lea",
            collector_number="161",
            quantity=4,
            market_price=450.0,
            my_price=382.5,
            cmc=1,
            rarity="common",
            type_line="Instant",
            oracle_text="Lightning Bolt deals 3 damage to any target.",
            mana_cost="{R}",
            searchable_text="lightning bolt limited edition alpha lea instant "
            "lightning bolt deals 3 damage to any target. common normal",
        ),
        make_card(
            "ragavan_foil",
            name="Ragavan, Nimble Pilferer",
            set_code="mh2",
            collector_number="138",
            quantity=1,
            is_foil=True,
            market_price=70.0,
            my_price=59.5,
            cmc=1,
            rarity="mythic",
            type_line="Legendary Creature — Monkey Pirate",
            mana_cost="{R}",
            searchable_text="ragavan, nimble pilferer modern horizons 2 mh2 legendary creature",
        ),
        make_card(
            "sword_etched",
            name="sword of fire and ice",
            set_code="2xm",
            collector_number="10",
            quantity=2,
            is_etched=True,
            market_price=30.0,
            cmc=3,
            rarity="rare",
            type_line="Artifact — Equipment",
            mana_cost="{3}",
        ),
        make_card(
            "command_promo",
            name="Prismari Command",
            set_code="stx",
            collector_number="214★",
            quantity=2,
            is_promo=True,
            market_price=8.0,
            my_price=6.8,
            cmc=3,
            rarity="rare",
            type_line="Instant",
            mana_cost="{1}{U}{R}",
        ),
        make_card(
            "goblin_token",
            name="Goblin",
            set_code="tmh2",
            collector_number="7",
            quantity=5,
            is_token=True,
            rarity="common",
            type_line="Token Creature — Goblin",
        ),
    ]
