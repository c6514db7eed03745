"""Models for server-side review sessions."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from memorycards.models.card import CardResponse


SessionStatus = Literal["loading", "ready", "flipped", "advancing", "complete", "error"]


class StartSessionRequest(BaseModel):
    """Body of POST /memory-cards/sessions."""

    deckId: str | None = Field(None, description="Review only this deck")
    courseId: str | None = Field(None, description="Review only decks of this course")
    limit: int | None = Field(None, ge=1, description="Queue size (defaults to the configured limit)")


class RateCardRequest(BaseModel):
    rating: str = Field(..., description="One of again, hard, good, easy")


class SessionResponse(BaseModel):
    """Snapshot of a review session."""

    sessionId: str
    status: SessionStatus
    cards: list[CardResponse]
    currentCard: CardResponse | None
    currentCardIndex: int
    isFlipped: bool
    isLoading: bool
    isError: bool
    errorMessage: str | None
    isComplete: bool
    hasCards: bool
    totalDue: int
    reviewsCompleted: int
    correctCount: int
    incorrectCount: int
    accuracy: int
    sessionDuration: int
    persistenceError: str | None = None
    pendingRetries: int = 0
