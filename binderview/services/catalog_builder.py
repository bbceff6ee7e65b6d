"""
Catalog build pipeline.

collection rows + Scryfall records -> index -> match -> enrich -> cards.json

The catalog is written only after every step succeeded. Unmatched rows go to
a separate diagnostic file.
"""

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from binderview.models.card import CatalogCard
from binderview.models.collection import CollectionEntry, UnmatchedEntry
from binderview.services.enrichment import enrich_entry
from binderview.services.matcher import match_entries
from binderview.services.reference_index import build_reference_index

logger = logging.getLogger(__name__)


@dataclass
class BuildSummary:
    """Counters reported at the end of a build."""

    rows_read: int = 0
    rows_skipped: int = 0
    matched: int = 0
    unmatched: int = 0
    merged_duplicates: int = 0
    cards_written: int = 0

    def log(self) -> None:
        logger.info(
            "catalog_build_summary",
            extra={
                "rows_read": self.rows_read,
                "rows_skipped": self.rows_skipped,
                "matched": self.matched,
                "unmatched": self.unmatched,
                "merged_duplicates": self.merged_duplicates,
                "cards_written": self.cards_written,
            },
        )
        logger.info(
            "Build summary: %d valid rows (%d skipped), %d matched, %d unmatched, "
            "%d duplicates merged, %d cards written",
            self.rows_read,
            self.rows_skipped,
            self.matched,
            self.unmatched,
            self.merged_duplicates,
            self.cards_written,
        )


@dataclass
class BuildResult:
    """Catalog cards plus the rows that could not be matched."""

    cards: list[CatalogCard] = field(default_factory=list)
    unmatched: list[UnmatchedEntry] = field(default_factory=list)
    summary: BuildSummary = field(default_factory=BuildSummary)


def build_catalog(
    entries: Iterable[CollectionEntry],
    records: Iterable[dict[str, Any]],
    multiplier: float | None = None,
) -> BuildResult:
    """
    Join collection rows to Scryfall records.

    Produces one card per (matched row, finish). Rows that resolve to the
    same card id (the same printing and finish listed twice) are merged by
    summing their quantities, keeping the first row's other values.

    Args:
        entries: Valid collection rows
        records: Scryfall bulk records
        multiplier: Discount for "my price"; settings default when None

    Returns:
        BuildResult with cards in collection order.
    """
    entries = list(entries)
    index = build_reference_index(records)
    matches = match_entries(entries, index)

    result = BuildResult(unmatched=matches.unmatched)
    result.summary.rows_read = len(entries)
    result.summary.matched = matches.match_count
    result.summary.unmatched = matches.miss_count

    by_id: dict[str, CatalogCard] = {}
    for entry, record in matches.matched:
        card = enrich_entry(entry, record, multiplier)
        existing = by_id.get(card.id)
        if existing is not None:
            existing.quantity += card.quantity
            result.summary.merged_duplicates += 1
            logger.info(
                "Merged duplicate row for %s (%s), kept my price %s and discarded %s",
                card.name,
                card.id,
                existing.my_price,
                card.my_price,
            )
            continue
        by_id[card.id] = card
        result.cards.append(card)

    result.summary.cards_written = len(result.cards)
    return result


def write_catalog(path: Path, cards: list[CatalogCard]) -> None:
    """Write the catalog as a JSON array with camelCase field names."""
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = [card.model_dump(mode="json", by_alias=True) for card in cards]
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)
    logger.info("Wrote %d cards to %s", len(cards), path)


def write_unmatched(path: Path, unmatched: list[UnmatchedEntry]) -> None:
    """
    Write the unmatched-rows report.

    When every row matched, a report left over from an earlier build is
    removed instead.
    """
    if not unmatched:
        if path.exists():
            path.unlink()
            logger.info("Removed previous unmatched report %s", path)
        return

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump([u.to_dict() for u in unmatched], f, indent=2, ensure_ascii=False)
    logger.info("Wrote %d unmatched entries to %s", len(unmatched), path)
