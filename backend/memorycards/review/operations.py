"""Due-queue and review operations shared by the HTTP routes and the card store."""

from __future__ import annotations

import logging
from datetime import datetime

from azure.core.exceptions import AzureError

from memorycards.models import Card, ReviewSubmission
from memorycards.repositories import (
    CardRepository,
    DeckNotFoundError,
    DeckRepository,
    DeckUpdateConflictError,
)
from memorycards.srs.queue import DueQueue
from memorycards.srs.ratings import is_correct, parse_rating
from memorycards.srs.time import utc_datetime_to_iso_z

logger = logging.getLogger(__name__)


def fetch_due_cards(
    deck_repo: DeckRepository,
    card_repo: CardRepository,
    user_id: str,
    limit: int,
    now: datetime,
    deck_id: str | None = None,
    course_id: str | None = None,
) -> DueQueue[Card]:
    """Select a user's due cards, optionally scoped to one deck or course.

    Raises:
        DeckNotFoundError: if `deck_id` is given and the user has no such deck.
    """
    if deck_id is not None and not deck_repo.exists(deck_id, user_id):
        raise DeckNotFoundError(f"Deck with ID {deck_id} not found")

    return card_repo.get_due_cards(
        user_id,
        utc_datetime_to_iso_z(now),
        limit,
        deck_id=deck_id,
        course_id=course_id,
    )


def submit_review(
    deck_repo: DeckRepository,
    card_repo: CardRepository,
    review: ReviewSubmission,
    now: datetime,
) -> Card:
    """Apply and persist one review, then update the deck statistics.

    A review carrying a `reviewId` that the card already recorded is not applied
    again; the stored card is returned as is. The deck statistics are secondary:
    a failure to update them is logged and does not fail the review.

    Raises:
        InvalidRating: before any read or write.
        DeckNotFoundError, CardNotFoundError, ReviewConflictError: from the repositories.
    """
    rating = parse_rating(review.rating)
    deck = deck_repo.get_by_id(review.deckId, review.userId)

    if review.reviewId is not None:
        stored = card_repo.get_by_id(review.cardId, review.userId)
        if stored.deckId == review.deckId and stored.lastReviewId == review.reviewId:
            logger.info(
                "Review already applied: user=%s card=%s review=%s",
                review.userId, review.cardId, review.reviewId,
            )
            return stored

    card = card_repo.apply_review(
        review.cardId,
        review.deckId,
        review.userId,
        rating,
        now,
        deck.scheduler_config,
        review_id=review.reviewId,
    )

    try:
        deck_repo.record_review(deck.deckId, deck.userId, is_correct(rating))
    except (AzureError, DeckNotFoundError, DeckUpdateConflictError):
        logger.exception("Deck statistics not updated: deck=%s card=%s", deck.deckId, review.cardId)

    logger.info(
        "Review applied: user=%s deck=%s card=%s rating=%s review_time_ms=%.0f "
        "session_duration_s=%.0f next_review_due=%s",
        review.userId, review.deckId, review.cardId, rating,
        review.reviewTime, review.sessionDuration, card.nextReviewDue,
    )
    return card
