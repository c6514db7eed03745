"""Models module for Pydantic schemas."""

from .deck import (
    Deck,
    DeckBase,
    DeckCreate,
    DeckResponse,
    DeckEnvelope,
    DeckListResponse,
)
from .card import (
    Card,
    CardBase,
    CardCreate,
    AddCardRequest,
    BatchAddCardsRequest,
    BatchAddCardsResponse,
    CardUpdate,
    CardResponse,
    CardEnvelope,
    CardListResponse,
)
from .review import (
    DueCards,
    DueCardsResponse,
    ReviewResponse,
    ReviewResult,
    ReviewSubmission,
)
from .session import (
    RateCardRequest,
    SessionResponse,
    StartSessionRequest,
)

__all__ = [
    "Deck",
    "DeckBase",
    "DeckCreate",
    "DeckResponse",
    "DeckEnvelope",
    "DeckListResponse",
    "Card",
    "CardBase",
    "CardCreate",
    "AddCardRequest",
    "BatchAddCardsRequest",
    "BatchAddCardsResponse",
    "CardUpdate",
    "CardResponse",
    "CardEnvelope",
    "CardListResponse",
    "DueCards",
    "DueCardsResponse",
    "ReviewResponse",
    "ReviewResult",
    "ReviewSubmission",
    "RateCardRequest",
    "SessionResponse",
    "StartSessionRequest",
]
