"""Models for due-queue and review endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field

from memorycards.models.card import CardResponse


class ReviewSubmission(BaseModel):
    """Body of POST /memory-cards/reviews.

    `rating` is validated by the scheduler rather than by the schema so that an
    unknown rating is reported as an invalid rating, not a malformed body.
    """

    userId: str = Field(..., min_length=1)
    cardId: str = Field(..., min_length=1)
    deckId: str = Field(..., min_length=1)
    rating: str = Field(..., description="One of again, hard, good, easy")
    reviewTime: float = Field(0, ge=0, description="Time spent on the card, in milliseconds")
    sessionDuration: float = Field(0, ge=0, description="Elapsed session time, in seconds")
    reviewId: str | None = Field(
        None, description="Client-chosen id; resending a review with the same id applies it once"
    )


class ReviewResult(BaseModel):
    card: CardResponse
    nextReview: str


class ReviewResponse(BaseModel):
    message: str
    data: ReviewResult


class DueCards(BaseModel):
    dueCards: list[CardResponse]
    totalDue: int


class DueCardsResponse(BaseModel):
    """Response for GET /memory-cards/users/{userId}/due-cards."""

    message: str
    data: DueCards
