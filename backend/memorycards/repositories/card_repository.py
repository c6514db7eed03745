"""Repository for Card CRUD, due-queue and review operations."""

import logging
from datetime import datetime
from azure.core import MatchConditions
from azure.cosmos import ContainerProxy
from azure.cosmos.exceptions import CosmosAccessConditionFailedError, CosmosResourceNotFoundError

from memorycards.db import get_cards_container
from memorycards.models import Card, CardCreate, CardUpdate, Deck
from memorycards.srs.queue import DueQueue, select_due_cards
from memorycards.srs.ratings import parse_rating
from memorycards.srs.scheduler import DEFAULT_CONFIG, SchedulerConfig
from memorycards.srs.time import utc_datetime_to_iso_z, utc_now_iso

logger = logging.getLogger(__name__)

# Attempts at an if-match replace before a review is reported as conflicting
MAX_REVIEW_ATTEMPTS = 3


class CardNotFoundError(Exception):
    """Raised when a card is not found."""

    pass


class ReviewConflictError(Exception):
    """Raised when a card kept changing underneath a review write."""

    pass


def _to_document(card: Card) -> dict:
    return {"id": card.cardId, **card.model_dump()}


class CardRepository:
    """Repository for Card database operations."""

    def __init__(self, container: ContainerProxy | None = None):
        """Initialize the repository with an optional container."""
        self._container = container

    @property
    def container(self) -> ContainerProxy:
        """Get the container, lazily initializing if needed."""
        if self._container is None:
            self._container = get_cards_container()
        return self._container

    def list_by_deck(self, deck_id: str, user_id: str) -> list[Card]:
        """List all cards in a deck."""
        query = "SELECT * FROM c WHERE c.deckId = @deckId AND c.userId = @userId ORDER BY c.createdAt DESC"
        parameters = [
            {"name": "@deckId", "value": deck_id},
            {"name": "@userId", "value": user_id},
        ]

        items = self.container.query_items(
            query=query,
            parameters=parameters,
            partition_key=user_id,
        )
        return [Card(**item) for item in items]

    def _read(self, card_id: str, user_id: str) -> dict:
        try:
            return self.container.read_item(item=card_id, partition_key=user_id)
        except CosmosResourceNotFoundError:
            raise CardNotFoundError(f"Card with ID {card_id} not found")

    def get_by_id(self, card_id: str, user_id: str) -> Card:
        """Get a card by ID and user ID."""
        return Card(**self._read(card_id, user_id))

    def create(self, deck: Deck, card_create: CardCreate) -> Card:
        """Create a new card in a deck. New cards are due immediately."""
        card = Card(
            deckId=deck.deckId,
            userId=deck.userId,
            courseId=deck.courseId,
            **card_create.model_dump(),
        )
        created_item = self.container.create_item(body=_to_document(card))
        return Card(**created_item)

    def create_many(self, deck: Deck, card_creates: list[CardCreate]) -> list[Card]:
        """Create several cards in a deck, in order."""
        return [self.create(deck, card_create) for card_create in card_creates]

    def update(self, card_id: str, user_id: str, card_update: CardUpdate) -> Card:
        """Update card content. Scheduling fields are left untouched."""
        existing = self.get_by_id(card_id, user_id)

        update_data = card_update.model_dump(exclude_unset=True, exclude_none=True, exclude={"userId"})
        if not update_data:
            return existing

        updated = existing.model_copy(update={**update_data, "updatedAt": utc_now_iso()})
        updated_item = self.container.replace_item(item=card_id, body=_to_document(updated))
        return Card(**updated_item)

    def list_due(
        self,
        user_id: str,
        now_iso: str,
        deck_id: str | None = None,
        course_id: str | None = None,
    ) -> list[Card]:
        """Return every due card for a user, unordered.

        Legacy documents without nextReviewDue are treated as due at `now_iso`.
        """
        query = (
            "SELECT * FROM c WHERE c.userId = @userId "
            "AND (NOT IS_DEFINED(c.nextReviewDue) OR c.nextReviewDue <= @nowIso)"
        )
        parameters = [
            {"name": "@userId", "value": user_id},
            {"name": "@nowIso", "value": now_iso},
        ]
        if deck_id is not None:
            query += " AND c.deckId = @deckId"
            parameters.append({"name": "@deckId", "value": deck_id})
        if course_id is not None:
            query += " AND c.courseId = @courseId"
            parameters.append({"name": "@courseId", "value": course_id})

        items = self.container.query_items(
            query=query,
            parameters=parameters,
            partition_key=user_id,
        )
        cards = []
        for item in items:
            if item.get("nextReviewDue") is None:
                item["nextReviewDue"] = now_iso
            cards.append(Card(**item))
        return cards

    def get_due_cards(
        self,
        user_id: str,
        now_iso: str,
        limit: int,
        deck_id: str | None = None,
        course_id: str | None = None,
    ) -> DueQueue[Card]:
        """Due cards in review order, capped at `limit`. Read-only."""
        queue = select_due_cards(self.list_due(user_id, now_iso, deck_id, course_id), now_iso, limit)
        logger.info(
            "Due cards selected: user=%s deck=%s course=%s returned=%d total=%d",
            user_id, deck_id, course_id, len(queue.cards), queue.total_due,
        )
        return queue

    def count_due_for_deck(self, user_id: str, deck_id: str, now_iso: str) -> int:
        """Count the cards currently due in a deck, legacy cards included."""
        query = (
            "SELECT VALUE COUNT(1) FROM c "
            "WHERE c.deckId = @deckId AND c.userId = @userId "
            "AND (NOT IS_DEFINED(c.nextReviewDue) OR c.nextReviewDue <= @nowIso)"
        )
        parameters = [
            {"name": "@deckId", "value": deck_id},
            {"name": "@userId", "value": user_id},
            {"name": "@nowIso", "value": now_iso},
        ]
        counts = list(
            self.container.query_items(
                query=query,
                parameters=parameters,
                partition_key=user_id,
            )
        )
        return counts[0] if counts else 0

    def apply_review(
        self,
        card_id: str,
        deck_id: str,
        user_id: str,
        rating: str,
        now: datetime,
        config: SchedulerConfig = DEFAULT_CONFIG,
        review_id: str | None = None,
    ) -> Card:
        """Apply a rating to a stored card and persist the result.

        The write is conditional on the document's ETag; if another writer got
        there first the card is re-read and the rating re-applied to the fresh
        state.

        Raises:
            InvalidRating: before anything is read or written.
            CardNotFoundError: if the card does not exist in `deck_id`.
            ReviewConflictError: after MAX_REVIEW_ATTEMPTS lost races.
        """
        checked = parse_rating(rating)

        for attempt in range(1, MAX_REVIEW_ATTEMPTS + 1):
            item = self._read(card_id, user_id)
            card = Card(**item)
            if card.deckId != deck_id:
                raise CardNotFoundError(f"Card with ID {card_id} not found in deck {deck_id}")

            reviewed = card.reviewed(checked, now, config, review_id=review_id)
            try:
                saved = self.container.replace_item(
                    item=card_id,
                    body=_to_document(reviewed),
                    etag=item.get("_etag"),
                    match_condition=MatchConditions.IfNotModified,
                )
                return Card(**saved)
            except CosmosAccessConditionFailedError:
                logger.warning(
                    "Review write conflict: card=%s user=%s attempt=%d/%d",
                    card_id, user_id, attempt, MAX_REVIEW_ATTEMPTS,
                )

        raise ReviewConflictError(
            f"Card {card_id} was modified concurrently; review at {utc_datetime_to_iso_z(now)} not applied"
        )

    def delete(self, card_id: str, user_id: str) -> None:
        """Delete a card by ID."""
        try:
            self.container.delete_item(item=card_id, partition_key=user_id)
        except CosmosResourceNotFoundError:
            raise CardNotFoundError(f"Card with ID {card_id} not found")

    def delete_by_deck(self, deck_id: str, user_id: str) -> int:
        """Delete all cards in a deck. Returns count of deleted cards."""
        cards = self.list_by_deck(deck_id, user_id)
        for card in cards:
            self.container.delete_item(item=card.cardId, partition_key=user_id)
        return len(cards)


# Singleton instance
_card_repository: CardRepository | None = None


def get_card_repository() -> CardRepository:
    """Get the card repository singleton."""
    global _card_repository
    if _card_repository is None:
        _card_repository = CardRepository()
    return _card_repository
