"""API routers module."""

from .decks import router as decks_router
from .cards import router as cards_router
from .reviews import router as reviews_router
from .sessions import router as sessions_router

__all__ = [
    "decks_router",
    "cards_router",
    "reviews_router",
    "sessions_router",
]
