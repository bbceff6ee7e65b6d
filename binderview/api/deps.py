from typing import Annotated

from fastapi import Depends, Request

from binderview.services.viewer import ViewerSession


def get_session(request: Request) -> ViewerSession:
    """Return the viewer session created at startup."""
    return request.app.state.viewer


def get_loaded_session(
    session: Annotated[ViewerSession, Depends(get_session)],
) -> ViewerSession:
    """
    Return the viewer session, failing with 503 until the catalog is loaded.

    Raises:
        CatalogUnavailableError: If the catalog failed to load
    """
    session.require_loaded()
    return session
