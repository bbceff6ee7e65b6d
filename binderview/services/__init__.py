"""
binderview services.

Catalog building (normalize, index, match, price, enrich) and the viewer
engine (filter, sort, paginate, preferences, notifications).
"""

from binderview.services.card_filter import filter_cards
from binderview.services.card_sort import sort_cards
from binderview.services.catalog_builder import (
    BuildResult,
    BuildSummary,
    build_catalog,
    write_catalog,
    write_unmatched,
)
from binderview.services.enrichment import (
    compose_searchable_text,
    enrich_entry,
    resolve_image_url,
)
from binderview.services.matcher import MatchResult, match_entries, match_entry
from binderview.services.normalizer import (
    index_key,
    normalize_collector_number,
    raw_collector_number,
)
from binderview.services.notifications import (
    Notification,
    NotificationChannel,
    Severity,
)
from binderview.services.pagination import has_more, next_page, reset_cursor
from binderview.services.preferences import (
    FavoritesImportResult,
    JsonFileStore,
    MemoryStore,
    PersistenceError,
    PreferenceStore,
)
from binderview.services.pricing import compute_my_price, resolve_market_price
from binderview.services.reference_index import ReferenceIndex, build_reference_index
from binderview.services.viewer import CatalogLoadError, ViewerSession, load_catalog

__all__ = [
    "BuildResult",
    "BuildSummary",
    "CatalogLoadError",
    "FavoritesImportResult",
    "JsonFileStore",
    "MatchResult",
    "MemoryStore",
    "Notification",
    "NotificationChannel",
    "PersistenceError",
    "PreferenceStore",
    "ReferenceIndex",
    "Severity",
    "ViewerSession",
    "build_catalog",
    "build_reference_index",
    "compose_searchable_text",
    "compute_my_price",
    "enrich_entry",
    "filter_cards",
    "has_more",
    "index_key",
    "load_catalog",
    "match_entries",
    "match_entry",
    "next_page",
    "normalize_collector_number",
    "raw_collector_number",
    "reset_cursor",
    "resolve_image_url",
    "resolve_market_price",
    "sort_cards",
    "write_catalog",
    "write_unmatched",
]
