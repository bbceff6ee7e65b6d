from binderview.api.cards import router as cards_router
from binderview.api.health import router as health_router
from binderview.api.notifications import router as notifications_router
from binderview.api.preferences import router as preferences_router

__all__ = [
    "cards_router",
    "health_router",
    "notifications_router",
    "preferences_router",
]
