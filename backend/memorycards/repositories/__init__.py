"""Deck and card repositories over Cosmos DB."""

from .deck_repository import (
    DeckRepository,
    DeckNotFoundError,
    DeckUpdateConflictError,
    get_deck_repository,
)
from .card_repository import (
    CardRepository,
    CardNotFoundError,
    ReviewConflictError,
    get_card_repository,
)

__all__ = [
    "DeckRepository",
    "DeckNotFoundError",
    "DeckUpdateConflictError",
    "get_deck_repository",
    "CardRepository",
    "CardNotFoundError",
    "ReviewConflictError",
    "get_card_repository",
]
