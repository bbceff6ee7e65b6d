"""
Viewer session: the working set behind the card grid.

Owns the full catalog, the current filtered and sorted view of it and the
pagination cursor. The renderer asks for batches as the user scrolls and
calls back in when filters, sort order or preferences change.

INVARIANT: 0 <= cursor <= len(filtered_cards), and every filter or sort
pass resets the cursor to 0.
"""

import json
import logging
from collections.abc import Iterable
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from binderview.config import settings
from binderview.models.card import CatalogCard
from binderview.models.criteria import DEFAULT_SORT, FilterCriteria, SortKey
from binderview.models.failure import CardNotFoundError, CatalogUnavailableError
from binderview.services.card_filter import filter_cards
from binderview.services.card_sort import sort_cards
from binderview.services.notifications import NotificationChannel
from binderview.services.pagination import has_more, next_page, reset_cursor
from binderview.services.preferences import FavoritesImportResult, PreferenceStore

logger = logging.getLogger(__name__)

_CATALOG_ADAPTER = TypeAdapter(list[CatalogCard])


class CatalogLoadError(Exception):
    """Raised when the catalog file is missing or cannot be parsed."""

    pass


def load_catalog(path: Path) -> list[CatalogCard]:
    """
    Read and validate the catalog file.

    Raises:
        CatalogLoadError: If the file is missing, unreadable or not a list of cards
    """
    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError as e:
        raise CatalogLoadError(
            f"Catalog not found at {path}. Run `binderview-build` first."
        ) from e
    except OSError as e:
        raise CatalogLoadError(f"Failed to read catalog {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise CatalogLoadError(f"Catalog {path} is not valid JSON: {e}") from e

    try:
        return _CATALOG_ADAPTER.validate_python(raw)
    except ValidationError as e:
        raise CatalogLoadError(f"Catalog {path} has invalid card data: {e}") from e


class ViewerSession:
    """
    Working set for one viewer.

    Usage:
        session = ViewerSession(PreferenceStore(storage, channel), channel)
        session.load(Path("data/cards.json"))
        session.apply(FilterCriteria(query="bolt"), SortKey.PRICE_DESC)
        while session.has_more_cards():
            render(session.get_next_batch())
    """

    def __init__(
        self,
        preferences: PreferenceStore,
        notifications: NotificationChannel | None = None,
        page_size: int | None = None,
    ) -> None:
        self.preferences = preferences
        self.notifications = notifications or NotificationChannel()
        self.page_size = page_size or settings.page_size
        self.criteria = FilterCriteria()
        self.sort_key: SortKey | str = DEFAULT_SORT
        self.loaded = False
        self.load_error: str | None = None
        self._all_cards: list[CatalogCard] = []
        self._by_id: dict[str, CatalogCard] = {}
        self._filtered: list[CatalogCard] = []
        self._cursor = 0

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    def load(self, path: Path, hide_ignored: bool = False) -> None:
        """
        Load the catalog and the saved preferences.

        A catalog failure leaves the working set empty, posts an error
        notification and re-raises. Preference failures only warn.

        Raises:
            CatalogLoadError: If the catalog cannot be loaded
        """
        try:
            cards = load_catalog(path)
        except CatalogLoadError as e:
            self._reset_working_set()
            self.load_error = str(e)
            logger.error("Failed to load initial card data: %s", e)
            self.notifications.error(
                "Failed to load card data. The viewer cannot show your collection."
            )
            raise

        self.load_cards(cards, hide_ignored=hide_ignored)
        logger.info("Loaded %d cards from %s", len(cards), path)

    def load_cards(self, cards: Iterable[CatalogCard], hide_ignored: bool = False) -> None:
        """Install an already parsed catalog and apply the initial view."""
        cards = list(cards)
        self.preferences.load()
        self.preferences.attach(cards)

        self._all_cards = cards
        self._by_id = {card.id: card for card in cards}
        self.loaded = True
        self.load_error = None
        self.apply(FilterCriteria(hide_ignored=hide_ignored), DEFAULT_SORT)

    def _reset_working_set(self) -> None:
        self._all_cards = []
        self._by_id = {}
        self._filtered = []
        self._cursor = reset_cursor()
        self.loaded = False

    def require_loaded(self) -> None:
        """
        Raises:
            CatalogUnavailableError: If no catalog has been loaded
        """
        if not self.loaded:
            raise CatalogUnavailableError(detail=self.load_error)

    # ------------------------------------------------------------------
    # Working set
    # ------------------------------------------------------------------

    @property
    def all_cards(self) -> list[CatalogCard]:
        return list(self._all_cards)

    @property
    def filtered_cards(self) -> list[CatalogCard]:
        return list(self._filtered)

    @property
    def cursor(self) -> int:
        return self._cursor

    def apply(
        self,
        criteria: FilterCriteria | None = None,
        sort_key: SortKey | str | None = None,
    ) -> int:
        """
        Filter the full catalog, sort the result and reset the cursor.

        Omitted arguments keep the current criteria or sort key.

        Returns:
            Number of cards in the new working set.
        """
        if criteria is not None:
            self.criteria = criteria
        if sort_key is not None:
            self.sort_key = sort_key

        filtered = filter_cards(self._all_cards, self.criteria)
        self.set_filtered_cards(sort_cards(filtered, self.sort_key))
        return len(self._filtered)

    def apply_sort(self, sort_key: SortKey | str) -> None:
        """Re-sort the current working set and reset the cursor."""
        self.sort_key = sort_key
        self.set_filtered_cards(sort_cards(self._filtered, sort_key))

    def set_filtered_cards(self, cards: Iterable[CatalogCard]) -> None:
        """Replace the working set wholesale. The cursor goes back to 0."""
        self._filtered = list(cards)
        self._cursor = reset_cursor()

    def get_next_batch(self) -> list[CatalogCard]:
        """Next page of the working set; empty once everything has been served."""
        page, self._cursor = next_page(self._filtered, self._cursor, self.page_size)
        return page

    def has_more_cards(self) -> bool:
        return has_more(self._cursor, len(self._filtered))

    def get_filtered_count(self) -> int:
        """Total copies in the working set, honoring quantity overrides."""
        return sum(card.owned_quantity for card in self._filtered)

    def get_card(self, card_id: str) -> CatalogCard:
        """
        Raises:
            CardNotFoundError: If the id is not in the catalog
        """
        card = self._by_id.get(card_id)
        if card is None:
            raise CardNotFoundError(card_id)
        return card

    # ------------------------------------------------------------------
    # Preferences
    # ------------------------------------------------------------------

    def is_favorite(self, card_id: str) -> bool:
        return self.preferences.is_favorite(card_id)

    def is_ignored(self, card_id: str) -> bool:
        return self.preferences.is_ignored(card_id)

    def toggle_favorite(self, card_id: str) -> bool:
        self.get_card(card_id)
        return self.preferences.toggle_favorite(card_id)

    def add_ignored(self, card_id: str) -> bool:
        self.get_card(card_id)
        return self.preferences.add_ignored(card_id)

    def remove_ignored(self, card_id: str) -> bool:
        self.get_card(card_id)
        return self.preferences.remove_ignored(card_id)

    def get_quantity(self, card_id: str) -> int:
        self.get_card(card_id)
        return self.preferences.get_quantity(card_id)

    def set_quantity(self, card_id: str, quantity: float) -> int:
        self.get_card(card_id)
        return self.preferences.set_quantity(card_id, quantity)

    def clear_favorites(self) -> int:
        count = self.preferences.clear_favorites()
        if count:
            self.notifications.info("Favorites list cleared.")
        else:
            self.notifications.info("Favorite list is already empty.")
        return count

    def clear_ignored(self) -> int:
        count = self.preferences.clear_ignored()
        if count:
            self.notifications.info("Ignored list cleared.")
        else:
            self.notifications.info("Ignored list is already empty.")
        return count

    def export_favorites_csv(self) -> str | None:
        csv_text = self.preferences.export_favorites_csv()
        if csv_text is None:
            self.notifications.info("No favorites to export.")
        return csv_text

    def import_favorites_csv(self, text: str) -> FavoritesImportResult:
        """
        Raises:
            ValueError: If the CSV has no data rows
        """
        result = self.preferences.import_favorites_csv(text)
        self.notifications.info(
            f"Imported {result.imported} favorites ({result.not_found} not found)."
        )
        return result
