"""
Build the card catalog.

Merges the collection export with Scryfall bulk data and writes the catalog
consumed by the viewer, plus a report of rows that found no match.

Usage:
    python -m binderview.jobs.build_catalog --csv cards.csv --output data/cards.json
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from binderview.config import settings
from binderview.parsers.collection_import import parse_collection_csv
from binderview.parsers.scryfall import BulkDataError, ensure_bulk_data, load_reference_records
from binderview.services.catalog_builder import (
    BuildSummary,
    build_catalog,
    write_catalog,
    write_unmatched,
)

logger = logging.getLogger(__name__)


async def run_build(
    csv_path: Path,
    output_path: Path,
    unmatched_path: Path,
    cache_dir: Path,
    *,
    refresh: bool = False,
    multiplier: float | None = None,
) -> BuildSummary:
    """
    Run the full catalog build.

    Raises:
        FileNotFoundError: If the collection export does not exist
        BulkDataError: If the Scryfall bulk data cannot be fetched or read
    """
    parsed = parse_collection_csv(csv_path, settings.default_language)
    if not parsed.entries:
        logger.warning("No valid card entries found in %s, nothing to build", csv_path)
        return BuildSummary(rows_skipped=parsed.skipped)

    bulk_path = await ensure_bulk_data(cache_dir, refresh=refresh)
    records = load_reference_records(bulk_path)
    if not records:
        raise BulkDataError(f"Bulk data in {bulk_path} contains no records")

    result = build_catalog(parsed.entries, records, multiplier)
    result.summary.rows_skipped = parsed.skipped

    write_catalog(output_path, result.cards)
    write_unmatched(unmatched_path, result.unmatched)

    result.summary.log()
    return result.summary


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Build the card catalog from a collection export")
    parser.add_argument(
        "--csv",
        type=Path,
        default=settings.collection_csv,
        help=f"Collection export (default: {settings.collection_csv})",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=settings.catalog_path,
        help=f"Catalog file to write (default: {settings.catalog_path})",
    )
    parser.add_argument(
        "--unmatched",
        type=Path,
        default=settings.unmatched_path,
        help=f"Unmatched rows report (default: {settings.unmatched_path})",
    )
    parser.add_argument(
        "--cache-dir",
        type=Path,
        default=settings.cache_dir,
        help="Directory for the cached Scryfall bulk file",
    )
    parser.add_argument(
        "--multiplier",
        type=float,
        default=settings.my_price_multiplier,
        help=f"My-price discount (default: {settings.my_price_multiplier})",
    )
    parser.add_argument(
        "--refresh",
        action="store_true",
        help="Re-download the bulk data even if a cached copy exists",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        asyncio.run(
            run_build(
                args.csv,
                args.output,
                args.unmatched,
                args.cache_dir,
                refresh=args.refresh,
                multiplier=args.multiplier,
            )
        )
    except FileNotFoundError as e:
        logger.error("Collection export not found: %s", e)
        sys.exit(1)
    except BulkDataError as e:
        logger.error("Failed to obtain Scryfall bulk data: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
