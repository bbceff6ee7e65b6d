from binderview.models.card import CatalogCard, Finish
from binderview.models.collection import CollectionEntry, UnmatchedEntry
from binderview.models.criteria import DEFAULT_SORT, FilterCriteria, SortKey
from binderview.models.failure import (
    CardNotFoundError,
    CatalogUnavailableError,
    FailureDetail,
    FailureKind,
    KnownError,
)

__all__ = [
    "DEFAULT_SORT",
    "CardNotFoundError",
    "CatalogCard",
    "CatalogUnavailableError",
    "CollectionEntry",
    "FailureDetail",
    "FailureKind",
    "FilterCriteria",
    "Finish",
    "KnownError",
    "SortKey",
    "UnmatchedEntry",
]
