from binderview.parsers.collection_import import (
    CollectionParseResult,
    parse_collection_csv,
    parse_collection_text,
)
from binderview.parsers.scryfall import (
    BulkDataError,
    download_bulk_data,
    ensure_bulk_data,
    load_reference_records,
)

__all__ = [
    "BulkDataError",
    "CollectionParseResult",
    "download_bulk_data",
    "ensure_bulk_data",
    "load_reference_records",
    "parse_collection_csv",
    "parse_collection_text",
]
