"""
Parser for collection spreadsheet exports.

Expects a CSV with a header row (ManaBox / Moxfield style):
    Name, Set code, Collector number, Quantity    (required)
    Language, Foil or Finish, Promo? or Promos, myPrice    (optional)

Rows missing a required column or with a non-positive or non-numeric
quantity are dropped and counted. They never abort the build.
"""

import csv
import logging
from dataclasses import dataclass, field
from io import StringIO
from pathlib import Path
from typing import Any

from binderview.models.card import Finish
from binderview.models.collection import DEFAULT_LANGUAGE, CollectionEntry

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("Name", "Set code", "Collector number", "Quantity")

FINISH_COLUMNS = ("Foil", "Finish")
PROMO_COLUMNS = ("Promo?", "Promos", "Promo")
PRICE_COLUMNS = ("myPrice", "My Price")

TRUE_VALUES = frozenset({"true", "yes", "y", "1", "promo"})


@dataclass
class CollectionParseResult:
    """Parsed rows plus the number of rows that were dropped."""

    entries: list[CollectionEntry] = field(default_factory=list)
    skipped: int = 0

    @property
    def total_rows(self) -> int:
        return len(self.entries) + self.skipped


def _first_value(row: dict[str, Any], columns: tuple[str, ...]) -> str:
    for col in columns:
        value = row.get(col)
        if value is not None and str(value).strip():
            return str(value).strip()
    return ""


def _parse_quantity(value: str) -> int | None:
    """Parse a quantity cell. Returns None for non-numeric or non-positive values."""
    try:
        quantity = float(value)
    except ValueError:
        return None
    if not quantity.is_integer() or quantity <= 0:
        return None
    return int(quantity)


def parse_row(row: dict[str, Any], default_language: str = DEFAULT_LANGUAGE) -> CollectionEntry | None:
    """
    Convert one CSV row to a CollectionEntry.

    Returns:
        The entry, or None when the row fails validation.
    """
    values = {col: str(row.get(col) or "").strip() for col in REQUIRED_COLUMNS}
    if not all(values.values()):
        return None

    quantity = _parse_quantity(values["Quantity"])
    if quantity is None:
        return None

    return CollectionEntry(
        name=values["Name"],
        set_code=values["Set code"],
        collector_number=values["Collector number"],
        quantity=quantity,
        finish=Finish.parse(_first_value(row, FINISH_COLUMNS)),
        language=(_first_value(row, ("Language",)) or default_language).lower(),
        promo=_first_value(row, PROMO_COLUMNS).lower() in TRUE_VALUES,
        my_price=_first_value(row, PRICE_COLUMNS) or None,
        row=dict(row),
    )


def parse_collection_text(text: str, default_language: str = DEFAULT_LANGUAGE) -> CollectionParseResult:
    """
    Parse collection CSV text.

    Header names are trimmed. Empty lines are ignored.

    Args:
        text: Raw CSV content
        default_language: Language used when the row has none

    Returns:
        CollectionParseResult with valid entries and the dropped row count.
    """
    result = CollectionParseResult()
    if not text or not text.strip():
        return result

    reader = csv.DictReader(StringIO(text.lstrip("\ufeff")))
    if not reader.fieldnames:
        return result
    reader.fieldnames = [name.strip() for name in reader.fieldnames]

    missing = [col for col in REQUIRED_COLUMNS if col not in reader.fieldnames]
    if missing:
        logger.warning("Collection export is missing required columns: %s", ", ".join(missing))

    for row in reader:
        if not any(str(v or "").strip() for k, v in row.items() if k is not None):
            continue

        entry = parse_row(row, default_language)
        if entry is None:
            logger.debug("Skipping collection row: %s", row)
            result.skipped += 1
            continue
        result.entries.append(entry)

    if result.skipped:
        logger.info(
            "Skipped %d rows due to missing required data or invalid quantity", result.skipped
        )
    logger.info("Found %d valid card entries in collection export", len(result.entries))
    return result


def parse_collection_csv(path: Path, default_language: str = DEFAULT_LANGUAGE) -> CollectionParseResult:
    """
    Parse a collection CSV file.

    Bytes that are not valid UTF-8 are replaced, so such rows fail to match
    instead of aborting the build.

    Raises:
        FileNotFoundError: If the export does not exist
    """
    with open(path, encoding="utf-8", errors="replace", newline="") as f:
        text = f.read()
    return parse_collection_text(text, default_language)
