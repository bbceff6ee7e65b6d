"""
User preference store: favorites, ignored cards, quantity overrides.

Three independent slots in a small key-value store. Every mutation writes
the affected slot straight away. A failed write is reported as a warning
and never undoes the in-memory change; the next successful write of the
same slot carries it.

INVARIANT: a card is never both favorite and ignored. Favoriting removes
it from the ignored list and ignoring removes it from the favorites.

INVARIANT: an override is stored only when it differs from the owned
quantity in the catalog.
"""

import csv
import json
import logging
import math
import os
from collections.abc import Iterable
from dataclasses import dataclass
from io import StringIO
from pathlib import Path
from typing import Any, Protocol

from binderview.models.card import CatalogCard
from binderview.services.notifications import NotificationChannel

logger = logging.getLogger(__name__)

FAVORITES_KEY = "binderview_favorites"
IGNORED_KEY = "binderview_ignored"
QUANTITIES_KEY = "binderview_quantities"

FAVORITE_ID_COLUMNS = ("id", "ID", "Scryfall ID", "ScryfallID")

FAVORITES_CSV_HEADERS = [
    "id",
    "Name",
    "Set",
    "Collector Number",
    "Rarity",
    "Quantity",
    "Foil",
    "Etched",
    "My Price",
    "Market Price USD",
]


class PersistenceError(Exception):
    """Raised by a KeyValueStore when a slot cannot be read or written."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Could not persist '{key}': {reason}")


class KeyValueStore(Protocol):
    """Synchronous string key-value storage."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStore:
    """In-process storage. Nothing survives a restart."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStore:
    """
    One file per key under a directory.

    Writes go to a temporary file first and are moved into place, so a
    crash mid-write never leaves a truncated slot behind.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceError(key, str(e)) from e

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(value, encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as e:
            raise PersistenceError(key, str(e)) from e

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(key, str(e)) from e


@dataclass
class FavoritesImportResult:
    """Outcome of importing favorites from CSV."""

    imported: int
    total_rows: int
    not_found: int


class PreferenceStore:
    """
    Favorites, ignored cards and quantity overrides keyed by catalog card id.

    Usage:
        store = PreferenceStore(JsonFileStore(path), notifications)
        store.load()
        store.attach(cards)
        store.toggle_favorite(card_id)
    """

    def __init__(
        self,
        storage: KeyValueStore,
        notifications: NotificationChannel | None = None,
    ) -> None:
        self._storage = storage
        self._notifications = notifications
        self._favorites: set[str] = set()
        self._ignored: set[str] = set()
        self._quantities: dict[str, int] = {}
        self._cards: dict[str, CatalogCard] = {}
        self.last_warning: str | None = None

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> None:
        """
        Read all three slots.

        Absent slots load as empty. Corrupt slots are reported, deleted and
        load as empty; they never stop the viewer from starting.
        """
        favorites = self._read_slot(FAVORITES_KEY, _parse_id_list)
        ignored = self._read_slot(IGNORED_KEY, _parse_id_list)
        quantities = self._read_slot(QUANTITIES_KEY, _parse_quantities)

        self._favorites = set(favorites or [])
        self._ignored = set(ignored or []) - self._favorites
        self._quantities = dict(quantities or {})

        logger.info(
            "Loaded %d favorites, %d ignored cards, %d quantity overrides",
            len(self._favorites),
            len(self._ignored),
            len(self._quantities),
        )

    def _read_slot(self, key: str, parse: Any) -> Any:
        try:
            raw = self._storage.get(key)
        except PersistenceError as e:
            self._warn(f"Could not load saved {_label(key)}. Starting empty.", e)
            return None
        if raw is None:
            return None

        try:
            return parse(json.loads(raw))
        except (ValueError, TypeError, RecursionError) as e:
            self._warn(f"Could not load saved {_label(key)}. Data might be corrupted.", e)
            try:
                self._storage.delete(key)
            except PersistenceError as delete_error:
                logger.warning("Failed to remove corrupted slot %s: %s", key, delete_error)
            return None

    def attach(self, cards: Iterable[CatalogCard]) -> None:
        """Register the catalog cards and set their runtime overlays."""
        self._cards = {card.id: card for card in cards}
        for card in self._cards.values():
            card.is_favorite = card.id in self._favorites
            card.is_ignored = card.id in self._ignored
            card.current_quantity = self._quantities.get(card.id, card.quantity)

    # ------------------------------------------------------------------
    # Favorites
    # ------------------------------------------------------------------

    def is_favorite(self, card_id: str) -> bool:
        return card_id in self._favorites

    def favorites(self) -> list[CatalogCard]:
        """Favorite cards in catalog order."""
        return [card for card in self._cards.values() if card.id in self._favorites]

    def toggle_favorite(self, card_id: str) -> bool:
        """
        Flip the favorite state of a card.

        Favoriting an ignored card also removes it from the ignored list.

        Returns:
            The new favorite state.
        """
        self.last_warning = None
        if card_id in self._favorites:
            self._favorites.discard(card_id)
            self._set_overlay(card_id, is_favorite=False)
            logger.debug("Card removed from favorites: %s", card_id)
        else:
            self._favorites.add(card_id)
            self._set_overlay(card_id, is_favorite=True)
            if card_id in self._ignored:
                self._ignored.discard(card_id)
                self._set_overlay(card_id, is_ignored=False)
                self._save(IGNORED_KEY, sorted(self._ignored))
            logger.debug("Card added to favorites: %s", card_id)

        self._save(FAVORITES_KEY, sorted(self._favorites))
        return card_id in self._favorites

    def clear_favorites(self) -> int:
        """Remove every favorite. Returns how many were cleared."""
        self.last_warning = None
        count = len(self._favorites)
        if count == 0:
            return 0
        for card_id in self._favorites:
            self._set_overlay(card_id, is_favorite=False)
        self._favorites.clear()
        self._save(FAVORITES_KEY, [])
        logger.info("Cleared %d favorites", count)
        return count

    # ------------------------------------------------------------------
    # Ignored
    # ------------------------------------------------------------------

    def is_ignored(self, card_id: str) -> bool:
        return card_id in self._ignored

    def add_ignored(self, card_id: str) -> bool:
        """
        Ignore a card, removing it from the favorites.

        Returns:
            True if the card was added, False if it was already ignored.
        """
        self.last_warning = None
        if card_id in self._ignored:
            return False

        self._ignored.add(card_id)
        self._set_overlay(card_id, is_ignored=True)
        if card_id in self._favorites:
            self._favorites.discard(card_id)
            self._set_overlay(card_id, is_favorite=False)
            self._save(FAVORITES_KEY, sorted(self._favorites))

        self._save(IGNORED_KEY, sorted(self._ignored))
        logger.debug("Card added to ignored: %s", card_id)
        return True

    def remove_ignored(self, card_id: str) -> bool:
        """
        Stop ignoring a card.

        Returns:
            True if the card was removed, False if it was not ignored.
        """
        self.last_warning = None
        if card_id not in self._ignored:
            return False

        self._ignored.discard(card_id)
        self._set_overlay(card_id, is_ignored=False)
        self._save(IGNORED_KEY, sorted(self._ignored))
        logger.debug("Card removed from ignored: %s", card_id)
        return True

    def clear_ignored(self) -> int:
        """Remove every card from the ignored list. Returns how many were cleared."""
        self.last_warning = None
        count = len(self._ignored)
        if count == 0:
            return 0
        for card_id in self._ignored:
            self._set_overlay(card_id, is_ignored=False)
        self._ignored.clear()
        self._save(IGNORED_KEY, [])
        logger.info("Cleared %d ignored cards", count)
        return count

    # ------------------------------------------------------------------
    # Quantities
    # ------------------------------------------------------------------

    def _owned_quantity(self, card_id: str) -> int:
        card = self._cards.get(card_id)
        return card.quantity if card is not None else 0

    def get_quantity(self, card_id: str) -> int:
        """The override if one exists, otherwise the owned quantity (0 for unknown cards)."""
        return self._quantities.get(card_id, self._owned_quantity(card_id))

    def has_override(self, card_id: str) -> bool:
        return card_id in self._quantities

    def set_quantity(self, card_id: str, quantity: float) -> int:
        """
        Set the current quantity of a card.

        The value is clamped to max(0, floor(quantity)). Setting it back to
        the owned quantity removes the override.

        Returns:
            The quantity actually stored.

        Raises:
            ValueError: If quantity is not a finite number
        """
        if not math.isfinite(quantity):
            raise ValueError(f"Quantity must be a finite number, got {quantity!r}")

        self.last_warning = None
        value = max(0, math.floor(quantity))
        self._set_overlay(card_id, current_quantity=value)

        if value == self._owned_quantity(card_id):
            self._quantities.pop(card_id, None)
        else:
            self._quantities[card_id] = value

        self._save(QUANTITIES_KEY, dict(sorted(self._quantities.items())))
        logger.debug("Quantity updated for %s: %d", card_id, value)
        return value

    # ------------------------------------------------------------------
    # CSV import / export
    # ------------------------------------------------------------------

    def export_favorites_csv(self) -> str | None:
        """
        Export the favorites as CSV.

        Returns:
            CSV text, or None when there are no favorites to export.
        """
        favorites = self.favorites()
        if not favorites:
            return None

        buffer = StringIO()
        writer = csv.DictWriter(buffer, fieldnames=FAVORITES_CSV_HEADERS, lineterminator="\n")
        writer.writeheader()
        for card in favorites:
            writer.writerow(
                {
                    "id": card.id,
                    "Name": card.name,
                    "Set": card.set_code.upper(),
                    "Collector Number": card.collector_number,
                    "Rarity": card.rarity,
                    "Quantity": self.get_quantity(card.id),
                    "Foil": str(card.is_foil).lower(),
                    "Etched": str(card.is_etched).lower(),
                    "My Price": f"{card.my_price:.2f}" if card.my_price is not None else "",
                    "Market Price USD": f"{card.market_price:.2f}",
                }
            )
        return buffer.getvalue()

    def import_favorites_csv(self, text: str) -> FavoritesImportResult:
        """
        Add the cards listed in a CSV to the favorites.

        Rows are matched by catalog id, falling back to the Scryfall id so
        that an export from a plain Scryfall list also works. Unknown ids
        are counted and skipped.

        Raises:
            ValueError: If the CSV has no data rows
        """
        self.last_warning = None
        rows = list(csv.DictReader(StringIO(text or "")))
        if not rows:
            raise ValueError("CSV file is empty or contains no data.")

        by_reference: dict[str, CatalogCard] = {}
        for c in self._cards.values():
            if c.reference_id:
                by_reference.setdefault(c.reference_id, c)
        imported = 0
        not_found = 0
        ignored_changed = False

        for row in rows:
            raw_id = next((row[col].strip() for col in FAVORITE_ID_COLUMNS if row.get(col)), "")
            if not raw_id:
                logger.warning("Skipping favorites row without an id column: %s", row)
                continue

            card = self._cards.get(raw_id) or by_reference.get(raw_id)
            if card is None:
                logger.warning("Card id %s from CSV not found in collection", raw_id)
                not_found += 1
                continue

            if card.id in self._favorites:
                continue
            self._favorites.add(card.id)
            card.is_favorite = True
            if card.id in self._ignored:
                self._ignored.discard(card.id)
                card.is_ignored = False
                ignored_changed = True
            imported += 1

        if imported:
            self._save(FAVORITES_KEY, sorted(self._favorites))
        if ignored_changed:
            self._save(IGNORED_KEY, sorted(self._ignored))

        return FavoritesImportResult(imported=imported, total_rows=len(rows), not_found=not_found)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _set_overlay(self, card_id: str, **values: Any) -> None:
        card = self._cards.get(card_id)
        if card is None:
            return
        for name, value in values.items():
            setattr(card, name, value)

    def _save(self, key: str, value: Any) -> bool:
        try:
            self._storage.set(key, json.dumps(value))
        except PersistenceError as e:
            self._warn(f"Could not save {_label(key)}. Changes might not persist.", e)
            return False
        return True

    def _warn(self, message: str, error: Exception) -> None:
        logger.warning("%s (%s)", message, error)
        self.last_warning = message
        if self._notifications is not None:
            self._notifications.warning(message)


def _label(key: str) -> str:
    return key.split("_", 1)[-1]


def _parse_id_list(value: Any) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError("expected a list of card ids")
    return value


def _parse_quantities(value: Any) -> dict[str, int]:
    if not isinstance(value, dict):
        raise ValueError("expected an object of card id -> quantity")
    quantities: dict[str, int] = {}
    for card_id, quantity in value.items():
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
            raise ValueError(f"invalid quantity for {card_id}: {quantity!r}")
        quantities[card_id] = quantity
    return quantities
