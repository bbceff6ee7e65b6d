import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from binderview.api import (
    cards_router,
    health_router,
    notifications_router,
    preferences_router,
)
from binderview.config import settings
from binderview.models.failure import KnownError
from binderview.services.notifications import NotificationChannel
from binderview.services.preferences import (
    JsonFileStore,
    KeyValueStore,
    MemoryStore,
    PreferenceStore,
)
from binderview.services.viewer import CatalogLoadError, ViewerSession

logger = logging.getLogger(__name__)


def create_session() -> ViewerSession:
    """Build a viewer session from settings. Does not load the catalog."""
    storage: KeyValueStore
    if settings.preferences_dir is not None:
        storage = JsonFileStore(settings.preferences_dir)
    else:
        storage = MemoryStore()
    notifications = NotificationChannel()
    preferences = PreferenceStore(storage, notifications)
    return ViewerSession(preferences, notifications, page_size=settings.page_size)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    session = create_session()
    try:
        session.load(settings.catalog_path)
    except CatalogLoadError:
        # Keep serving so /ready and /notifications report the failure
        logger.error("Viewer started without a catalog")
    app.state.viewer = session
    yield


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("binderview"),
    lifespan=lifespan,
)

app.include_router(cards_router)
app.include_router(health_router)
app.include_router(notifications_router)
app.include_router(preferences_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(KnownError)
async def known_error_handler(_request: Request, exc: KnownError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.to_detail().model_dump(mode="json")},
    )
