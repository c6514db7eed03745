"""Card models for API requests and responses."""

from datetime import datetime
from pydantic import BaseModel, Field
from uuid import uuid4

from memorycards.srs.ratings import Rating
from memorycards.srs.scheduler import (
    DEFAULT_CONFIG,
    DEFAULT_EASE_FACTOR,
    DEFAULT_INTERVAL_DAYS,
    ScheduleState,
    SchedulerConfig,
    apply_rating,
)
from memorycards.srs.time import utc_datetime_to_iso_z, utc_now_iso


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid4())


class CardBase(BaseModel):
    """Base card model with common fields."""

    question: str = Field(..., min_length=1, max_length=2000, description="Question side of the card")
    answer: str = Field(..., min_length=1, max_length=2000, description="Answer side of the card")
    chapterId: str = Field("default", min_length=1, description="Course chapter the card refers to")
    sectionId: str = Field("default", min_length=1, description="Course section the card refers to")
    difficultyLevel: int = Field(3, ge=1, le=5, description="Authoring difficulty, 5 is hardest")


class CardCreate(CardBase):
    """Model for creating a new card."""

    pass


class AddCardRequest(CardCreate):
    """Body of POST /memory-cards/decks/{deckId}/cards."""

    userId: str = Field(..., min_length=1)


class BatchAddCardsRequest(BaseModel):
    """Body of POST /memory-cards/decks/{deckId}/cards/batch."""

    userId: str = Field(..., min_length=1)
    cards: list[CardCreate] = Field(..., min_length=1, max_length=100)


class CardUpdate(BaseModel):
    """Model for updating card content. Scheduling state cannot be edited."""

    userId: str = Field(..., min_length=1)
    question: str | None = Field(None, min_length=1, max_length=2000)
    answer: str | None = Field(None, min_length=1, max_length=2000)
    difficultyLevel: int | None = Field(None, ge=1, le=5)


class Card(CardBase):
    """Full card model as stored in the database."""

    cardId: str = Field(default_factory=generate_uuid, description="Unique identifier")
    deckId: str = Field(..., description="Parent deck ID")
    userId: str = Field(..., description="Owner user ID (partition key)")
    courseId: str = Field(..., description="Course of the parent deck")
    createdAt: str = Field(default_factory=utc_now_iso, description="Creation timestamp")
    updatedAt: str = Field(default_factory=utc_now_iso, description="Last update timestamp")

    # Scheduling state (owned by the scheduler)
    repetitionCount: int = Field(0, ge=0, description="Number of completed reviews")
    correctCount: int = Field(0, ge=0)
    incorrectCount: int = Field(0, ge=0)
    lastReviewed: str | None = Field(None, description="Last review timestamp (UTC ISO Z)")
    nextReviewDue: str = Field(default_factory=utc_now_iso, description="Next due timestamp (UTC ISO Z)")
    interval: float = Field(DEFAULT_INTERVAL_DAYS, gt=0, description="Current interval in days")
    easeFactor: float = Field(DEFAULT_EASE_FACTOR, gt=0, description="Interval growth multiplier")
    lastRating: Rating | None = Field(None, description="Most recent rating applied to this card")
    lastReviewId: str | None = Field(None, description="Id of the most recent review applied")

    class Config:
        """Pydantic config."""

        json_schema_extra = {
            "example": {
                "cardId": "123e4567-e89b-12d3-a456-426614174001",
                "deckId": "123e4567-e89b-12d3-a456-426614174000",
                "userId": "user-001",
                "courseId": "course-001",
                "question": "What is the capital of France?",
                "answer": "Paris",
                "chapterId": "chapter-1",
                "sectionId": "section-1",
                "difficultyLevel": 3,
                "repetitionCount": 0,
                "correctCount": 0,
                "incorrectCount": 0,
                "lastReviewed": None,
                "nextReviewDue": "2025-01-01T00:00:00Z",
                "interval": 1.0,
                "easeFactor": 2.5,
            }
        }

    def schedule_state(self) -> ScheduleState:
        return ScheduleState(
            repetition_count=self.repetitionCount,
            correct_count=self.correctCount,
            incorrect_count=self.incorrectCount,
            interval_days=self.interval,
            ease_factor=self.easeFactor,
            last_reviewed=self.lastReviewed,
            next_review_due=self.nextReviewDue,
        )

    def reviewed(
        self,
        rating: str,
        now: datetime,
        config: SchedulerConfig = DEFAULT_CONFIG,
        review_id: str | None = None,
    ) -> "Card":
        """Return a copy of this card with `rating` applied at `now`.

        Raises:
            InvalidRating: if `rating` is not one of again/hard/good/easy.
        """
        state = apply_rating(self.schedule_state(), rating, now, config)
        return self.model_copy(
            update={
                "repetitionCount": state.repetition_count,
                "correctCount": state.correct_count,
                "incorrectCount": state.incorrect_count,
                "interval": state.interval_days,
                "easeFactor": state.ease_factor,
                "lastReviewed": state.last_reviewed,
                "nextReviewDue": state.next_review_due,
                "lastRating": rating,
                "lastReviewId": review_id,
                "updatedAt": utc_datetime_to_iso_z(now),
            }
        )


class CardResponse(Card):
    """Card response model returned by API."""

    pass


class CardEnvelope(BaseModel):
    message: str
    data: CardResponse


class CardListResponse(BaseModel):
    """Response containing a list of cards."""

    cards: list[CardResponse]
    count: int


class BatchAddCardsResponse(BaseModel):
    message: str
    data: list[CardResponse]
    cardsAdded: int
