"""Due-queue and review submission API router."""

from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, Query, status
from memorycards.auth import CurrentUser, ensure_same_user, get_current_user
from memorycards.config import get_app_settings
from memorycards.models import (
    CardResponse,
    DueCards,
    DueCardsResponse,
    ReviewResponse,
    ReviewResult,
    ReviewSubmission,
)
from memorycards.repositories import (
    CardNotFoundError,
    DeckNotFoundError,
    ReviewConflictError,
    get_card_repository,
    get_deck_repository,
)
from memorycards.review.operations import fetch_due_cards, submit_review
from memorycards.srs.queue import resolve_limit
from memorycards.srs.ratings import InvalidRating
from memorycards.srs.time import utc_now

router = APIRouter(prefix="/memory-cards", tags=["reviews"])


@router.get("/users/{user_id}/due-cards", response_model=DueCardsResponse)
async def get_due_cards(
    user_id: str,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    deck_id: str | None = Query(None, alias="deckId"),
    course_id: str | None = Query(None, alias="courseId"),
    limit: int | None = Query(None, description="Maximum number of cards to return"),
) -> DueCardsResponse:
    """Return the user's due cards, most overdue first."""
    ensure_same_user(user, user_id, "access to review cards")

    settings = get_app_settings()
    try:
        effective_limit = resolve_limit(
            limit, settings.due_cards_default_limit, settings.due_cards_max_limit
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    try:
        queue = fetch_due_cards(
            get_deck_repository(),
            get_card_repository(),
            user_id,
            effective_limit,
            utc_now(),
            deck_id=deck_id,
            course_id=course_id,
        )
    except DeckNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Deck not found",
        )

    return DueCardsResponse(
        message="Due cards retrieved successfully",
        data=DueCards(
            dueCards=[CardResponse(**card.model_dump()) for card in queue.cards],
            totalDue=queue.total_due,
        ),
    )


@router.post("/reviews", response_model=ReviewResponse)
async def post_review(
    review: ReviewSubmission, user: Annotated[CurrentUser, Depends(get_current_user)]
) -> ReviewResponse:
    """Apply a rating to a card and persist its new schedule."""
    ensure_same_user(user, review.userId, "card review")

    try:
        card = submit_review(get_deck_repository(), get_card_repository(), review, utc_now())
    except InvalidRating as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DeckNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Deck with ID {review.deckId} not found",
        )
    except CardNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Card with ID {review.cardId} not found",
        )
    except ReviewConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return ReviewResponse(
        message="Review submitted successfully",
        data=ReviewResult(card=CardResponse(**card.model_dump()), nextReview=card.nextReviewDue),
    )
