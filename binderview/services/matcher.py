"""
Matching of collection rows to Scryfall records.

A miss is not an error: the row is reported in the unmatched list and the
build carries on with everything that did match.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from binderview.models.collection import CollectionEntry, UnmatchedEntry
from binderview.services.normalizer import (
    has_marker,
    index_key,
    normalize_collector_number,
    raw_collector_number,
)
from binderview.services.reference_index import ReferenceIndex

logger = logging.getLogger(__name__)


@dataclass
class MatchResult:
    """Outcome of matching a whole collection."""

    matched: list[tuple[CollectionEntry, dict[str, Any]]] = field(default_factory=list)
    unmatched: list[UnmatchedEntry] = field(default_factory=list)

    @property
    def match_count(self) -> int:
        return len(self.matched)

    @property
    def miss_count(self) -> int:
        return len(self.unmatched)


def match_entry(
    entry: CollectionEntry, index: ReferenceIndex
) -> tuple[dict[str, Any] | None, str]:
    """
    Look up one collection row.

    Tries the normalized key first and, for collector numbers carrying the
    marker glyph, the raw key. The first hit wins.

    Returns:
        (record or None, the normalized key that was attempted)
    """
    key = index_key(
        entry.set_code,
        normalize_collector_number(entry.collector_number),
        entry.language,
    )
    record = index.get(key)

    if record is None and has_marker(entry.collector_number):
        raw_key = index_key(
            entry.set_code,
            raw_collector_number(entry.collector_number),
            entry.language,
        )
        record = index.get(raw_key)

    return record, key


def match_entries(entries: Iterable[CollectionEntry], index: ReferenceIndex) -> MatchResult:
    """Match every row, routing misses to the unmatched list."""
    result = MatchResult()

    for entry in entries:
        record, key = match_entry(entry, index)
        if record is None:
            logger.debug(
                "No Scryfall match for key %s (%s, %s #%s)",
                key,
                entry.name,
                entry.set_code,
                entry.collector_number,
            )
            result.unmatched.append(
                UnmatchedEntry(reason=f"No Scryfall match found for key: {key}", entry=entry)
            )
            continue
        result.matched.append((entry, record))

    return result
