"""
Enrichment of matched collection rows.

Turns a (CollectionEntry, Scryfall record) pair into a CatalogCard with the
derived fields the viewer relies on: price, image, search text.
"""

import re
from collections.abc import Mapping, Sequence
from typing import Any

from binderview.models.card import CatalogCard, Finish
from binderview.models.collection import CollectionEntry
from binderview.services.pricing import compute_my_price, resolve_market_price

# Image sizes in order of preference
IMAGE_PREFERENCE = ("border_crop", "normal", "large")

TOKEN_LAYOUTS = frozenset({"token", "double_faced_token"})

_WHITESPACE = re.compile(r"\s+")


def resolve_image_url(
    image_uris: Mapping[str, Any] | None,
    card_faces: Sequence[Mapping[str, Any]] | None = None,
) -> str | None:
    """
    Pick the best image for a printing.

    Prefers border_crop, then normal, then large on the card itself, then the
    same sizes on the first face of a multi-faced card. Returns None when no
    image exists (tokens without art crops, for example).
    """
    if image_uris:
        for size in IMAGE_PREFERENCE:
            if image_uris.get(size):
                return str(image_uris[size])

    if card_faces:
        face_uris = card_faces[0].get("image_uris") if card_faces[0] else None
        if face_uris:
            for size in IMAGE_PREFERENCE:
                if face_uris.get(size):
                    return str(face_uris[size])

    return None


def compose_searchable_text(*fields: str | None) -> str:
    """
    Join the non-empty fields into one lowercase search string.

    Callers pass fields in the order name, set name, set code, type line,
    oracle text, rarity, finish label. Runs of whitespace collapse to one
    space.
    """
    joined = " ".join(str(f) for f in fields if f)
    return _WHITESPACE.sub(" ", joined.lower()).strip()


def card_id(reference_id: str, finish: Finish) -> str:
    """Catalog id: the Scryfall id plus a finish suffix for foil and etched copies."""
    if finish is Finish.FOIL:
        return f"{reference_id}_foil"
    if finish is Finish.ETCHED:
        return f"{reference_id}_etched"
    return reference_id


def enrich_entry(
    entry: CollectionEntry,
    record: Mapping[str, Any],
    multiplier: float | None = None,
) -> CatalogCard:
    """
    Build the catalog card for a matched collection row.

    Args:
        entry: The collection row
        record: The Scryfall record it matched
        multiplier: Discount applied to the market price for "my price"

    Returns:
        CatalogCard with resolved price, image and searchable text.
    """
    is_promo = entry.promo or record.get("promo") is True
    market_price = resolve_market_price(record.get("prices"), entry.finish, is_promo)
    cmc = record.get("cmc")

    return CatalogCard(
        id=card_id(str(record.get("id", "")), entry.finish),
        name=entry.name,
        set_code=entry.set_code,
        collector_number=entry.collector_number,
        quantity=entry.quantity,
        is_foil=entry.finish is Finish.FOIL,
        is_etched=entry.finish is Finish.ETCHED,
        is_promo=is_promo,
        is_token=record.get("layout") in TOKEN_LAYOUTS,
        market_price=market_price,
        my_price=compute_my_price(market_price, entry.my_price, multiplier),
        cmc=cmc if isinstance(cmc, int | float) and not isinstance(cmc, bool) else 0,
        searchable_text=compose_searchable_text(
            entry.name,
            record.get("set_name"),
            entry.set_code,
            record.get("type_line"),
            record.get("oracle_text"),
            record.get("rarity"),
            entry.finish.value,
        ),
        image_url=resolve_image_url(record.get("image_uris"), record.get("card_faces")),
        set_name=record.get("set_name"),
        rarity=record.get("rarity"),
        type_line=record.get("type_line"),
        oracle_text=record.get("oracle_text"),
        mana_cost=record.get("mana_cost"),
        colors=record.get("colors"),
        color_identity=record.get("color_identity"),
        keywords=record.get("keywords"),
        layout=record.get("layout"),
        language=entry.language,
        legalities=record.get("legalities"),
        reference_id=record.get("id"),
        oracle_id=record.get("oracle_id"),
        reprint=bool(record.get("reprint", False)),
        variation=bool(record.get("variation", False)),
    )
