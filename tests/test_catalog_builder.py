"""Tests for the catalog build pipeline."""

import json
import logging
import math
from pathlib import Path
from typing import Any

import pytest

from binderview.models.card import CatalogCard, Finish
from binderview.models.collection import CollectionEntry, UnmatchedEntry
from binderview.parsers.collection_import import parse_collection_csv, parse_collection_text
from binderview.services.card_sort import sort_cards
from binderview.services.catalog_builder import build_catalog, write_catalog, write_unmatched


class TestBuildCatalog:
    def test_lightning_bolt_scenario(self) -> None:
        """One normal row against one record yields one priced card."""
        parsed = parse_collection_text(
            "Name,Set code,Collector number,Quantity,Foil\nLightning Bolt,LEA,161,4,normal\n"
        )
        records = [
            {
                "id": "bolt-lea",
                "set": "LEA",
                "collector_number": "161",
                "lang": "en",
                "prices": {"usd": "450.00"},
            }
        ]

        result = build_catalog(parsed.entries, records, multiplier=0.85)

        assert len(result.cards) == 1
        card = result.cards[0]
        assert card.market_price == 450.0
        assert card.my_price == pytest.approx(382.5)
        assert card.is_foil is False
        assert card.quantity == 4
        assert result.unmatched == []

    def test_sample_collection(
        self, sample_collection_path: Path, sample_records: list[dict[str, Any]]
    ) -> None:
        parsed = parse_collection_csv(sample_collection_path)

        result = build_catalog(parsed.entries, sample_records, multiplier=0.85)

        names = [card.name for card in result.cards]
        assert names == [
            "Lightning Bolt",
            "Ragavan, Nimble Pilferer",
            "Prismari Command",
            "Delver of Secrets",
            "Goblin",
        ]
        assert result.summary.rows_read == 6
        assert result.summary.matched == 5
        assert result.summary.unmatched == 1
        assert result.summary.cards_written == 5
        assert result.unmatched[0].entry.name == "Mystery Card"
        assert "xyz:1:en" in result.unmatched[0].reason

    def test_unmatched_rows_produce_no_cards(self) -> None:
        entry = CollectionEntry(name="Ghost", set_code="ZZZ", collector_number="1", quantity=1)

        result = build_catalog([entry], [])

        assert result.cards == []
        assert len(result.unmatched) == 1

    def test_duplicate_rows_are_merged(self, sample_records: list[dict[str, Any]]) -> None:
        entries = [
            CollectionEntry(name="Lightning Bolt", set_code="LEA", collector_number="161", quantity=4),
            CollectionEntry(name="Lightning Bolt", set_code="lea", collector_number="161", quantity=2),
        ]

        result = build_catalog(entries, sample_records)

        assert len(result.cards) == 1
        assert result.cards[0].quantity == 6
        assert result.summary.merged_duplicates == 1

    def test_merge_logs_discarded_price(
        self, sample_records: list[dict[str, Any]], caplog: pytest.LogCaptureFixture
    ) -> None:
        entries = [
            CollectionEntry(
                name="Lightning Bolt",
                set_code="LEA",
                collector_number="161",
                quantity=1,
                my_price="400",
            ),
            CollectionEntry(
                name="Lightning Bolt",
                set_code="LEA",
                collector_number="161",
                quantity=1,
                my_price="350",
            ),
        ]

        with caplog.at_level(logging.INFO, logger="binderview.services.catalog_builder"):
            result = build_catalog(entries, sample_records)

        assert result.cards[0].my_price == 400.0
        assert "kept my price 400.0 and discarded 350.0" in caplog.text

    def test_non_finite_override_keeps_price_order(
        self, sample_records: list[dict[str, Any]]
    ) -> None:
        entries = [
            CollectionEntry(name="Delver", set_code="ISD", collector_number="51", quantity=1),
            CollectionEntry(
                name="Lightning Bolt",
                set_code="LEA",
                collector_number="161",
                quantity=1,
                my_price="nan",
            ),
            CollectionEntry(name="Ragavan", set_code="MH2", collector_number="138", quantity=1),
        ]

        result = build_catalog(entries, sample_records, multiplier=0.85)
        prices = [card.effective_price for card in sort_cards(result.cards, "price_desc")]

        assert all(math.isfinite(price) for price in prices)
        assert prices == sorted(prices, reverse=True)
        assert prices[:2] == pytest.approx([382.5, 42.5])

    def test_finishes_are_separate_cards(self, sample_records: list[dict[str, Any]]) -> None:
        entries = [
            CollectionEntry(name="Ragavan", set_code="MH2", collector_number="138", quantity=1),
            CollectionEntry(
                name="Ragavan",
                set_code="MH2",
                collector_number="138",
                quantity=1,
                finish=Finish.FOIL,
            ),
        ]

        result = build_catalog(entries, sample_records)

        assert [card.id.endswith("_foil") for card in result.cards] == [False, True]
        assert [card.market_price for card in result.cards] == [50.0, 70.0]

    def test_language_selects_printing(self, sample_records: list[dict[str, Any]]) -> None:
        entry = CollectionEntry(
            name="Lightning Bolt", set_code="LEA", collector_number="161", quantity=1, language="de"
        )

        result = build_catalog([entry], sample_records)

        assert result.cards[0].market_price == 300.0
        assert result.cards[0].language == "de"


class TestWriteCatalog:
    def test_writes_camel_case_json(self, tmp_path: Path) -> None:
        card = CatalogCard(
            id="bolt",
            name="Lightning Bolt",
            set_code="lea",
            collector_number="161",
            quantity=4,
            market_price=450.0,
            my_price=382.5,
            is_favorite=True,
        )
        path = tmp_path / "data" / "cards.json"

        write_catalog(path, [card])

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data[0]["id"] == "bolt"
        assert data[0]["set"] == "lea"
        assert data[0]["collectorNumber"] == "161"
        assert data[0]["marketPrice"] == 450.0
        assert data[0]["myPrice"] == 382.5
        assert data[0]["isFoil"] is False
        assert "isFavorite" not in data[0]
        assert "currentQuantity" not in data[0]

    def test_round_trips_through_model(self, tmp_path: Path) -> None:
        card = CatalogCard(id="x", name="X", colors=["R"], legalities={"modern": "legal"})
        path = tmp_path / "cards.json"

        write_catalog(path, [card])

        loaded = CatalogCard.model_validate(json.loads(path.read_text(encoding="utf-8"))[0])
        assert loaded == card


class TestWriteUnmatched:
    def test_writes_reason_and_source_row(self, tmp_path: Path) -> None:
        row = {"Name": "Ghost", "Set code": "ZZZ", "Collector number": "1", "Quantity": "1"}
        entry = CollectionEntry(name="Ghost", set_code="ZZZ", collector_number="1", quantity=1, row=row)
        path = tmp_path / "unmatched.json"

        write_unmatched(path, [UnmatchedEntry(reason="No Scryfall match found for key: zzz:1:en", entry=entry)])

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data == [{"reason": "No Scryfall match found for key: zzz:1:en", "sourceRow": row}]

    def test_removes_stale_report(self, tmp_path: Path) -> None:
        path = tmp_path / "unmatched.json"
        path.write_text("[]", encoding="utf-8")

        write_unmatched(path, [])

        assert not path.exists()

    def test_nothing_to_write(self, tmp_path: Path) -> None:
        path = tmp_path / "unmatched.json"

        write_unmatched(path, [])

        assert not path.exists()
