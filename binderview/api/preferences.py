"""
Preference API endpoints.

Bulk operations on the favorites and ignored lists, and favorites CSV
import/export.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field

from binderview.api.deps import get_loaded_session
from binderview.services.viewer import ViewerSession

router = APIRouter(tags=["preferences"])

EXPORT_FILE_NAME = "binderview_favorites.csv"


class ClearResponse(BaseModel):
    cleared: int
    warning: str | None = None


class FavoritesImportRequest(BaseModel):
    text: str = Field(
        ...,
        description="CSV with an id, ID, Scryfall ID or ScryfallID column",
        examples=["id\n0000579f-7b35-4ed3-b44c-db2a538066fe_foil"],
    )


class FavoritesImportResponse(BaseModel):
    imported: int
    total_rows: int
    not_found: int
    warning: str | None = None


@router.get(
    "/favorites/export",
    responses={
        200: {"content": {"text/csv": {}}},
        204: {"description": "No favorites to export"},
    },
)
async def export_favorites(
    session: Annotated[ViewerSession, Depends(get_loaded_session)],
) -> Response:
    """Download the favorites as CSV."""
    csv_text = session.export_favorites_csv()
    if csv_text is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return Response(
        content=csv_text,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILE_NAME}"'},
    )


@router.post("/favorites/import", response_model=FavoritesImportResponse)
async def import_favorites(
    request: FavoritesImportRequest,
    session: Annotated[ViewerSession, Depends(get_loaded_session)],
) -> FavoritesImportResponse:
    """
    Add the cards listed in a CSV to the favorites.

    Unknown ids are counted in not_found and skipped.
    """
    try:
        result = session.import_favorites_csv(request.text)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e
    return FavoritesImportResponse(
        imported=result.imported,
        total_rows=result.total_rows,
        not_found=result.not_found,
        warning=session.preferences.last_warning,
    )


@router.delete("/favorites", response_model=ClearResponse)
async def clear_favorites(
    session: Annotated[ViewerSession, Depends(get_loaded_session)],
) -> ClearResponse:
    """Remove every favorite."""
    cleared = session.clear_favorites()
    return ClearResponse(cleared=cleared, warning=session.preferences.last_warning)


@router.delete("/ignored", response_model=ClearResponse)
async def clear_ignored(
    session: Annotated[ViewerSession, Depends(get_loaded_session)],
) -> ClearResponse:
    """Remove every card from the ignored list."""
    cleared = session.clear_ignored()
    return ClearResponse(cleared=cleared, warning=session.preferences.last_warning)
