"""
Reference index over Scryfall bulk records.

Maps "{set}:{collector_number}:{lang}" to the Scryfall card dict. The same
(set, collector number) pair exists once per printed language, so the
language is part of the identity.
"""

import logging
from collections.abc import Iterable
from typing import Any

from binderview.services.normalizer import (
    has_marker,
    index_key,
    normalize_collector_number,
    raw_collector_number,
)

logger = logging.getLogger(__name__)

ReferenceIndex = dict[str, dict[str, Any]]


def build_reference_index(records: Iterable[dict[str, Any]]) -> ReferenceIndex:
    """
    Build the lookup index in a single pass.

    Records without a set or collector number are skipped. Each record is
    stored under its normalized key (later records overwrite earlier ones).
    Records whose raw collector number carries the marker glyph and differs
    from the normalized form are also stored under the raw key, unless that
    key is already taken.

    Args:
        records: Scryfall card dicts

    Returns:
        Dict mapping composite keys to Scryfall card dicts.
    """
    index: ReferenceIndex = {}
    skipped = 0

    for record in records:
        set_code = record.get("set")
        collector_number = record.get("collector_number")
        if not set_code or not collector_number:
            skipped += 1
            continue

        lang = record.get("lang")
        clean = normalize_collector_number(collector_number)
        index[index_key(set_code, clean, lang)] = record

        raw = raw_collector_number(collector_number)
        if raw != clean and has_marker(raw):
            raw_key = index_key(set_code, raw, lang)
            if raw_key not in index:
                index[raw_key] = record

    logger.info("Reference index built with %d keys (%d records skipped)", len(index), skipped)
    return index
