"""Deck models for API requests and responses."""

from pydantic import BaseModel, Field
from uuid import uuid4

from memorycards.srs.scheduler import MAX_INTERVAL_MODIFIER, SchedulerConfig
from memorycards.srs.time import utc_now_iso


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid4())


class DeckBase(BaseModel):
    """Base deck model with common fields."""

    courseId: str = Field(..., min_length=1, description="Course the deck belongs to")
    title: str = Field(..., min_length=1, max_length=200, description="Title of the deck")
    description: str | None = Field(None, max_length=1000, description="Optional description")


class DeckCreate(DeckBase):
    """Model for creating a new deck."""

    userId: str = Field(..., min_length=1, description="Owner user ID")
    intervalModifier: float = Field(
        1.0, gt=0, le=MAX_INTERVAL_MODIFIER, description="Multiplier applied to every interval"
    )
    easyBonus: float = Field(1.3, gt=1, description="Extra growth for 'easy' ratings")


class Deck(DeckBase):
    """Full deck model as stored in the database."""

    deckId: str = Field(default_factory=generate_uuid, description="Unique identifier")
    userId: str = Field(..., description="Owner user ID (partition key)")
    intervalModifier: float = Field(1.0, gt=0, le=MAX_INTERVAL_MODIFIER)
    easyBonus: float = Field(1.3, gt=1)

    # Review statistics
    totalReviews: int = Field(0, ge=0)
    correctReviews: int = Field(0, ge=0)

    createdAt: str = Field(default_factory=utc_now_iso, description="Creation timestamp")
    updatedAt: str = Field(default_factory=utc_now_iso, description="Last update timestamp")

    class Config:
        """Pydantic config."""

        json_schema_extra = {
            "example": {
                "deckId": "123e4567-e89b-12d3-a456-426614174000",
                "userId": "user-001",
                "courseId": "course-001",
                "title": "Geography",
                "description": "Memory cards for Geography",
                "intervalModifier": 1.0,
                "easyBonus": 1.3,
                "totalReviews": 0,
                "correctReviews": 0,
                "createdAt": "2025-01-01T00:00:00Z",
                "updatedAt": "2025-01-01T00:00:00Z",
            }
        }

    @property
    def scheduler_config(self) -> SchedulerConfig:
        return SchedulerConfig(interval_modifier=self.intervalModifier, easy_bonus=self.easyBonus)


class DeckResponse(Deck):
    """Deck response model returned by API."""

    dueCardCount: int | None = None


class DeckEnvelope(BaseModel):
    message: str
    data: DeckResponse


class DeckListResponse(BaseModel):
    """Response containing a list of decks."""

    decks: list[DeckResponse]
    count: int
