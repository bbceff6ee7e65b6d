"""
Card API endpoints.

Serves the working set to the renderer in batches and applies per-card
preference changes.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from binderview.api.deps import get_loaded_session
from binderview.models.card import CatalogCard
from binderview.models.criteria import DEFAULT_SORT, FilterCriteria
from binderview.services.viewer import ViewerSession

router = APIRouter(prefix="/cards", tags=["cards"])


class CardBatchResponse(BaseModel):
    """One page of the working set."""

    cards: list[dict[str, Any]] = Field(default_factory=list)
    has_more: bool = False
    cursor: int = 0
    total_cards: int = Field(
        default=0,
        description="Number of distinct cards in the working set",
    )
    filtered_count: int = Field(
        default=0,
        description="Total copies in the working set, honoring quantity overrides",
    )


class CardQueryRequest(BaseModel):
    """Filter and sort request. Resets the cursor."""

    criteria: FilterCriteria = Field(default_factory=FilterCriteria)
    sort: str = Field(
        default=DEFAULT_SORT.value,
        description="Sort key, e.g. price_desc or name_asc. Unknown keys keep the filter order.",
        examples=["price_desc"],
    )


class FavoriteResponse(BaseModel):
    card_id: str
    favorite: bool
    ignored: bool
    warning: str | None = None


class IgnoredResponse(BaseModel):
    card_id: str
    ignored: bool
    changed: bool = Field(
        ...,
        description="False when the card was already in the requested state",
    )
    favorite: bool
    warning: str | None = None


class QuantityUpdateRequest(BaseModel):
    quantity: float = Field(..., description="Values are floored and clamped at 0")


class QuantityResponse(BaseModel):
    card_id: str
    quantity: int
    warning: str | None = None


def card_payload(card: CatalogCard) -> dict[str, Any]:
    """Catalog fields plus the runtime preference state."""
    data = card.model_dump(mode="json", by_alias=True)
    data["isFavorite"] = card.is_favorite
    data["isIgnored"] = card.is_ignored
    data["currentQuantity"] = card.owned_quantity
    return data


def _batch(session: ViewerSession) -> CardBatchResponse:
    page = session.get_next_batch()
    return CardBatchResponse(
        cards=[card_payload(card) for card in page],
        has_more=session.has_more_cards(),
        cursor=session.cursor,
        total_cards=len(session.filtered_cards),
        filtered_count=session.get_filtered_count(),
    )


@router.get("", response_model=CardBatchResponse)
async def get_next_batch(
    session: Annotated[ViewerSession, Depends(get_loaded_session)],
) -> CardBatchResponse:
    """
    Next batch of cards.

    Each call advances the cursor. Once has_more is false, further calls
    return an empty list until the next query.
    """
    return _batch(session)


@router.post("/query", response_model=CardBatchResponse)
async def query_cards(
    request: CardQueryRequest,
    session: Annotated[ViewerSession, Depends(get_loaded_session)],
) -> CardBatchResponse:
    """Filter and sort the catalog, then return the first batch."""
    session.apply(request.criteria, request.sort)
    return _batch(session)


@router.post("/{card_id}/favorite", response_model=FavoriteResponse)
async def toggle_favorite(
    card_id: str,
    session: Annotated[ViewerSession, Depends(get_loaded_session)],
) -> FavoriteResponse:
    """Toggle the favorite state of a card. Favoriting un-ignores it."""
    favorite = session.toggle_favorite(card_id)
    return FavoriteResponse(
        card_id=card_id,
        favorite=favorite,
        ignored=session.is_ignored(card_id),
        warning=session.preferences.last_warning,
    )


@router.post("/{card_id}/ignored", response_model=IgnoredResponse)
async def add_ignored(
    card_id: str,
    session: Annotated[ViewerSession, Depends(get_loaded_session)],
) -> IgnoredResponse:
    """Ignore a card. Ignoring removes it from the favorites."""
    changed = session.add_ignored(card_id)
    return IgnoredResponse(
        card_id=card_id,
        ignored=True,
        changed=changed,
        favorite=session.is_favorite(card_id),
        warning=session.preferences.last_warning,
    )


@router.delete("/{card_id}/ignored", response_model=IgnoredResponse)
async def remove_ignored(
    card_id: str,
    session: Annotated[ViewerSession, Depends(get_loaded_session)],
) -> IgnoredResponse:
    """Stop ignoring a card."""
    changed = session.remove_ignored(card_id)
    return IgnoredResponse(
        card_id=card_id,
        ignored=False,
        changed=changed,
        favorite=session.is_favorite(card_id),
        warning=session.preferences.last_warning,
    )


@router.put("/{card_id}/quantity", response_model=QuantityResponse)
async def set_quantity(
    card_id: str,
    request: QuantityUpdateRequest,
    session: Annotated[ViewerSession, Depends(get_loaded_session)],
) -> QuantityResponse:
    """Set the current quantity of a card."""
    try:
        quantity = session.set_quantity(card_id, request.quantity)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e
    return QuantityResponse(
        card_id=card_id,
        quantity=quantity,
        warning=session.preferences.last_warning,
    )
