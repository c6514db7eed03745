"""Review session controller.

A session snapshots a due-queue and walks it one card at a time:

    loading -> ready <-> flipped -> advancing -> ready ... -> complete
       \\-> error (fetch failed; retry() refetches)

Flipping only toggles what is displayed. Rating a card runs the scheduler on it,
advances immediately and queues the durable write; writes go out one at a time in
the order the ratings were given. A failed write does not rewind the session, it
is recorded in `persistence_error` / `failed_reviews` for the caller to retry.

Only the per-card writes are durable. The session itself lives in memory and is
dropped when the queue is exhausted or the user walks away.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime
from typing import Callable
from uuid import uuid4

from memorycards.models import Card, CardResponse, ReviewSubmission, SessionResponse
from memorycards.models.session import SessionStatus
from memorycards.srs.ratings import is_correct, parse_rating
from memorycards.srs.time import utc_now

from .store import CardStore, CardStoreError, extract_error_message

logger = logging.getLogger(__name__)

DEFAULT_TICK_SECONDS = 1.0
PERSISTENCE_ERROR = "Failed to save review"


class ReviewSession:
    """Drives one pass through a user's due cards."""

    def __init__(
        self,
        store: CardStore,
        user_id: str,
        deck_id: str | None = None,
        course_id: str | None = None,
        limit: int | None = None,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = utc_now,
        session_id: str | None = None,
    ):
        self.session_id = session_id or str(uuid4())
        self.user_id = user_id
        self.deck_id = deck_id
        self.course_id = course_id
        self.limit = limit

        self._store = store
        self._clock = clock
        self._now = now

        self.status: SessionStatus = "loading"
        self.cards: list[Card] = []
        self.total_due = 0
        self.current_card_index = 0
        self.is_flipped = False
        self.error_message: str | None = None

        self.reviewed_cards: list[Card] = []
        self.reviews_completed = 0
        self.correct_count = 0
        self.incorrect_count = 0

        self.session_start: float | None = None
        self.session_duration = 0
        self.closed = False

        self.persistence_error: str | None = None
        self.failed_reviews: list[ReviewSubmission] = []

        self._card_shown_at: float | None = None
        self._last_write: asyncio.Task | None = None
        self._timer: asyncio.Task | None = None

    # -- derived state -------------------------------------------------------

    @property
    def is_loading(self) -> bool:
        return self.status == "loading"

    @property
    def is_error(self) -> bool:
        return self.status == "error"

    @property
    def is_complete(self) -> bool:
        return self.status == "complete"

    @property
    def has_cards(self) -> bool:
        return len(self.cards) > 0

    @property
    def is_active(self) -> bool:
        return not self.closed and self.status not in ("complete", "error")

    @property
    def current_card(self) -> Card | None:
        if 0 <= self.current_card_index < len(self.cards):
            return self.cards[self.current_card_index]
        return None

    @property
    def accuracy(self) -> int:
        """Percentage of correct ratings, 0 when nothing has been rated."""
        if self.reviews_completed == 0:
            return 0
        percent = round(self.correct_count / self.reviews_completed * 100)
        return min(100, max(0, percent))

    # -- loading -------------------------------------------------------------

    async def load(self) -> None:
        """Fetch the due-queue and reset the session to its first card."""
        if self.closed:
            return

        self.status = "loading"
        self.error_message = None
        self.cards = []

        try:
            queue = await self._store.get_due_cards(
                self.user_id,
                deck_id=self.deck_id,
                limit=self.limit,
                course_id=self.course_id,
            )
        except CardStoreError as e:
            self.status = "error"
            self.error_message = extract_error_message(e)
            logger.warning(
                "Due cards fetch failed: session=%s user=%s deck=%s status=%s message=%s",
                self.session_id, self.user_id, self.deck_id, e.status, self.error_message,
            )
            return

        self.cards = list(queue.cards)
        self.total_due = queue.total_due
        self.current_card_index = 0
        self.is_flipped = False
        self.reviewed_cards = []
        self.reviews_completed = 0
        self.correct_count = 0
        self.incorrect_count = 0

        self.session_start = self._clock()
        self._card_shown_at = self.session_start
        self.session_duration = 0
        self.status = "ready" if self.cards else "complete"

        logger.info(
            "Review session started: session=%s user=%s deck=%s cards=%d total_due=%d",
            self.session_id, self.user_id, self.deck_id, len(self.cards), self.total_due,
        )

    async def retry(self) -> None:
        """Refetch after a failed load, or re-send reviews whose write failed."""
        if self.is_error:
            await self.load()
        elif self.failed_reviews:
            await self.retry_failed_reviews()

    # -- card actions --------------------------------------------------------

    def flip_card(self) -> bool:
        """Toggle between question and answer. Has no scheduling effect."""
        if self.closed or self.status not in ("ready", "flipped"):
            return self.is_flipped
        self.is_flipped = not self.is_flipped
        self.status = "flipped" if self.is_flipped else "ready"
        return self.is_flipped

    async def rate_card(self, rating: str) -> Card | None:
        """Rate the current card and move to the next one.

        Returns the locally rescheduled card, or None when there is nothing to
        rate (loading, error, complete or closed session).

        Raises:
            InvalidRating: if `rating` is not one of again/hard/good/easy; the
                session is left untouched.
        """
        card = self.current_card
        if self.closed or self.status not in ("ready", "flipped") or card is None:
            return None

        checked = parse_rating(rating)
        updated = card.reviewed(checked, self._now())
        self.status = "advancing"

        shown_at = self._card_shown_at if self._card_shown_at is not None else self._clock()
        review = ReviewSubmission(
            userId=self.user_id,
            cardId=card.cardId,
            deckId=card.deckId,
            rating=checked,
            reviewTime=max(0.0, (self._clock() - shown_at) * 1000),
            sessionDuration=self.tick(),
            reviewId=str(uuid4()),
        )

        self.reviewed_cards.append(updated)
        self.reviews_completed += 1
        if is_correct(checked):
            self.correct_count += 1
        else:
            self.incorrect_count += 1

        self.is_flipped = False
        self.current_card_index += 1
        self._card_shown_at = self._clock()

        if self.current_card_index >= len(self.cards):
            self.tick()
            self.status = "complete"
            self._stop_timer()
            logger.info(
                "Review session complete: session=%s reviews=%d accuracy=%d duration_s=%d",
                self.session_id, self.reviews_completed, self.accuracy, self.session_duration,
            )
        else:
            self.status = "ready"

        self._enqueue_write(review, len(self.reviewed_cards) - 1)
        return updated

    # -- persistence ---------------------------------------------------------

    def _enqueue_write(self, review: ReviewSubmission, position: int | None) -> None:
        previous = self._last_write
        self._last_write = asyncio.create_task(self._persist(review, position, previous))

    async def _persist(
        self,
        review: ReviewSubmission,
        position: int | None,
        previous: asyncio.Task | None,
    ) -> None:
        if previous is not None:
            # Ordering only; the previous write records its own failure
            await asyncio.wait([previous])

        try:
            saved = await self._store.submit_review(review)
        except CardStoreError as e:
            self._record_failure(review, extract_error_message(e, fallback=PERSISTENCE_ERROR))
            logger.error(
                "Review not saved: session=%s card=%s rating=%s status=%s message=%s",
                self.session_id, review.cardId, review.rating, e.status, self.persistence_error,
            )
            return
        except Exception:
            self._record_failure(review, PERSISTENCE_ERROR)
            logger.exception(
                "Review not saved: session=%s card=%s rating=%s",
                self.session_id, review.cardId, review.rating,
            )
            return

        if position is not None:
            self.reviewed_cards[position] = saved

    def _record_failure(self, review: ReviewSubmission, message: str) -> None:
        self.failed_reviews.append(review)
        self.persistence_error = message

    async def flush(self) -> None:
        """Wait until every queued review write has finished."""
        if self._last_write is not None:
            await self._last_write

    async def retry_failed_reviews(self) -> None:
        """Re-send failed review writes, oldest first."""
        pending, self.failed_reviews = self.failed_reviews, []
        self.persistence_error = None
        for review in pending:
            self._enqueue_write(review, None)
        await self.flush()

    # -- timing --------------------------------------------------------------

    def tick(self) -> int:
        """Recompute the elapsed session time in whole seconds.

        Frozen once the session is complete or closed; never goes backwards.
        """
        if self.session_start is None or self.closed or self.is_complete:
            return self.session_duration
        elapsed = int(self._clock() - self.session_start)
        self.session_duration = max(self.session_duration, elapsed)
        return self.session_duration

    async def run_timer(self, interval: float = DEFAULT_TICK_SECONDS) -> None:
        while self.is_active:
            await asyncio.sleep(interval)
            self.tick()

    def start_timer(self, interval: float = DEFAULT_TICK_SECONDS) -> asyncio.Task:
        self._stop_timer()
        self._timer = asyncio.create_task(self.run_timer(interval))
        return self._timer

    def _stop_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    def close(self) -> None:
        """Abandon the session. Queued writes still complete in the background."""
        self.tick()
        self.closed = True
        self._stop_timer()

    # -- presentation --------------------------------------------------------

    def to_response(self) -> SessionResponse:
        current = self.current_card
        return SessionResponse(
            sessionId=self.session_id,
            status=self.status,
            cards=[CardResponse(**card.model_dump()) for card in self.cards],
            currentCard=CardResponse(**current.model_dump()) if current is not None else None,
            currentCardIndex=self.current_card_index,
            isFlipped=self.is_flipped,
            isLoading=self.is_loading,
            isError=self.is_error,
            errorMessage=self.error_message,
            isComplete=self.is_complete,
            hasCards=self.has_cards,
            totalDue=self.total_due,
            reviewsCompleted=self.reviews_completed,
            correctCount=self.correct_count,
            incorrectCount=self.incorrect_count,
            accuracy=self.accuracy,
            sessionDuration=self.tick(),
            persistenceError=self.persistence_error,
            pendingRetries=len(self.failed_reviews),
        )
