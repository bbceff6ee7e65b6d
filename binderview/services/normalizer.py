"""
Collector-number normalization and index keys.

The same functions are used when indexing Scryfall records and when looking
up collection rows, so both sides always agree on the key format.
"""

import re

from binderview.config import COLLECTOR_NUMBER_MARKER

# Everything that is not a digit, lowercase letter or the marker glyph
_STRIP_PATTERN = re.compile(rf"[^0-9a-z{COLLECTOR_NUMBER_MARKER}]")


def raw_collector_number(value: object) -> str:
    """Lowercased, otherwise untouched collector number."""
    if value is None:
        return ""
    return str(value).lower()


def normalize_collector_number(value: object) -> str:
    """
    Normalize a collector number for matching.

    Lowercases and removes every character except digits, lowercase letters
    and the marker glyph. Idempotent; None and "" both yield "".

    Examples:
        >>> normalize_collector_number("100★")
        '100★'
        >>> normalize_collector_number("100A")
        '100a'
        >>> normalize_collector_number("SLD-12")
        'sld12'
    """
    return _STRIP_PATTERN.sub("", raw_collector_number(value))


def has_marker(value: object) -> bool:
    """Whether the raw collector number carries the marker glyph."""
    return COLLECTOR_NUMBER_MARKER in raw_collector_number(value)


def index_key(set_code: object, collector_number: str, language: object) -> str:
    """Composite lookup key "{set}:{collector_number}:{language}", lowercased."""
    return f"{set_code or ''}:{collector_number}:{language or ''}".lower()
