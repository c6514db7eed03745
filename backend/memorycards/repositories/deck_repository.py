"""Repository for Deck CRUD operations."""

import logging
from azure.core import MatchConditions
from azure.cosmos import ContainerProxy
from azure.cosmos.exceptions import CosmosAccessConditionFailedError, CosmosResourceNotFoundError

from memorycards.db import get_decks_container
from memorycards.models import Deck, DeckCreate
from memorycards.srs.time import utc_now_iso

logger = logging.getLogger(__name__)

# Attempts at an if-match replace of the deck statistics
MAX_STATS_ATTEMPTS = 3


class DeckNotFoundError(Exception):
    """Raised when a deck is not found."""

    pass


class DeckUpdateConflictError(Exception):
    """Raised when a deck kept changing underneath a statistics write."""

    pass


def _to_document(deck: Deck) -> dict:
    return {"id": deck.deckId, **deck.model_dump()}


class DeckRepository:
    """Repository for Deck database operations."""

    def __init__(self, container: ContainerProxy | None = None):
        """Initialize the repository with an optional container."""
        self._container = container

    @property
    def container(self) -> ContainerProxy:
        """Get the container, lazily initializing if needed."""
        if self._container is None:
            self._container = get_decks_container()
        return self._container

    def list_by_user(self, user_id: str) -> list[Deck]:
        """List all decks for a user, newest first."""
        query = "SELECT * FROM c WHERE c.userId = @userId ORDER BY c.createdAt DESC"
        parameters = [{"name": "@userId", "value": user_id}]

        items = self.container.query_items(
            query=query,
            parameters=parameters,
            partition_key=user_id,
        )
        return [Deck(**item) for item in items]

    def get_by_id(self, deck_id: str, user_id: str) -> Deck:
        """Get a deck by ID and user ID."""
        try:
            item = self.container.read_item(item=deck_id, partition_key=user_id)
            return Deck(**item)
        except CosmosResourceNotFoundError:
            raise DeckNotFoundError(f"Deck with ID {deck_id} not found")

    def create(self, deck_create: DeckCreate) -> Deck:
        """Create a new deck."""
        deck = Deck(
            userId=deck_create.userId,
            courseId=deck_create.courseId,
            title=deck_create.title,
            description=deck_create.description or f"Memory cards for {deck_create.title}",
            intervalModifier=deck_create.intervalModifier,
            easyBonus=deck_create.easyBonus,
        )
        created_item = self.container.create_item(body=_to_document(deck))
        logger.info("Deck created: deck=%s user=%s course=%s", deck.deckId, deck.userId, deck.courseId)
        return Deck(**created_item)

    def record_review(self, deck_id: str, user_id: str, correct: bool) -> Deck:
        """Add one review to the deck statistics.

        Written with an if-match on the deck ETag so concurrent reviews do not
        drop each other's increments.

        Raises:
            DeckNotFoundError: if the deck does not exist.
            DeckUpdateConflictError: after MAX_STATS_ATTEMPTS lost races.
        """
        for attempt in range(1, MAX_STATS_ATTEMPTS + 1):
            try:
                item = self.container.read_item(item=deck_id, partition_key=user_id)
            except CosmosResourceNotFoundError:
                raise DeckNotFoundError(f"Deck with ID {deck_id} not found")

            deck = Deck(**item)
            deck.totalReviews += 1
            if correct:
                deck.correctReviews += 1
            deck.updatedAt = utc_now_iso()

            try:
                updated_item = self.container.replace_item(
                    item=deck_id,
                    body=_to_document(deck),
                    etag=item.get("_etag"),
                    match_condition=MatchConditions.IfNotModified,
                )
                return Deck(**updated_item)
            except CosmosAccessConditionFailedError:
                logger.warning(
                    "Deck statistics conflict: deck=%s user=%s attempt=%d/%d",
                    deck_id, user_id, attempt, MAX_STATS_ATTEMPTS,
                )

        raise DeckUpdateConflictError(f"Deck {deck_id} was modified concurrently")

    def delete(self, deck_id: str, user_id: str) -> None:
        """Delete a deck by ID."""
        try:
            self.container.delete_item(item=deck_id, partition_key=user_id)
        except CosmosResourceNotFoundError:
            raise DeckNotFoundError(f"Deck with ID {deck_id} not found")

    def exists(self, deck_id: str, user_id: str) -> bool:
        """Check if a deck exists."""
        try:
            self.get_by_id(deck_id, user_id)
            return True
        except DeckNotFoundError:
            return False


# Singleton instance
_deck_repository: DeckRepository | None = None


def get_deck_repository() -> DeckRepository:
    """Get the deck repository singleton."""
    global _deck_repository
    if _deck_repository is None:
        _deck_repository = DeckRepository()
    return _deck_repository
