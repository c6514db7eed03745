"""Card store contract used by review sessions.

A review session only talks to a CardStore. Two implementations exist:
RepositoryCardStore (in-process, over the Cosmos repositories) and
MemoryCardsClient (over HTTP, see client.py). Both raise CardStoreError for
every failure a session has to surface.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Iterator, Protocol

from azure.core.exceptions import AzureError

from memorycards.config import get_app_settings
from memorycards.models import Card, CardCreate, Deck, DeckCreate, ReviewSubmission
from memorycards.repositories import (
    CardNotFoundError,
    CardRepository,
    DeckNotFoundError,
    DeckRepository,
    ReviewConflictError,
    get_card_repository,
    get_deck_repository,
)
from memorycards.srs.queue import DEFAULT_DUE_LIMIT, MAX_DUE_LIMIT, DueQueue, resolve_limit
from memorycards.srs.time import utc_now

from .operations import fetch_due_cards, submit_review

logger = logging.getLogger(__name__)

DEFAULT_FETCH_ERROR = "Failed to load review cards"
DECK_NOT_FOUND_MESSAGE = "This deck does not exist or has no cards due for review"


class CardStoreError(Exception):
    """A card store call failed.

    Attributes:
        status: HTTP-style status code, or None for transport failures.
        data: Decoded error body, e.g. {"message": "Server error"}.
    """

    def __init__(self, message: str, status: int | None = None, data: Any = None):
        self.message = message
        self.status = status
        self.data = data
        super().__init__(message)


def extract_error_message(error: Exception, fallback: str = DEFAULT_FETCH_ERROR) -> str:
    """Turn a store failure into text fit for a user.

    Looks at data.message, data.detail and data.error, then the exception text.
    A 404 without any message gets a deck-specific explanation.
    """
    data = getattr(error, "data", None)
    if isinstance(data, dict):
        for key in ("message", "detail", "error"):
            value = data.get(key)
            if isinstance(value, str) and value:
                return value

    if getattr(error, "status", None) == 404:
        return DECK_NOT_FOUND_MESSAGE

    message = getattr(error, "message", None) or str(error)
    return message or fallback


class CardStore(Protocol):
    async def create_deck(self, deck_create: DeckCreate) -> Deck: ...

    async def add_card(self, deck_id: str, user_id: str, card_create: CardCreate) -> Card: ...

    async def get_due_cards(
        self,
        user_id: str,
        deck_id: str | None = None,
        limit: int | None = None,
        course_id: str | None = None,
    ) -> DueQueue[Card]: ...

    async def submit_review(self, review: ReviewSubmission) -> Card: ...


@contextmanager
def _store_errors() -> Iterator[None]:
    try:
        yield
    except (DeckNotFoundError, CardNotFoundError) as e:
        raise CardStoreError(str(e), status=404, data={"message": str(e)}) from e
    except ReviewConflictError as e:
        raise CardStoreError(str(e), status=409, data={"message": str(e)}) from e
    except ValueError as e:
        raise CardStoreError(str(e), status=400, data={"message": str(e)}) from e
    except AzureError as e:
        logger.exception("Card store backend failure")
        raise CardStoreError(str(e), status=500, data={"message": "Card store unavailable"}) from e


class RepositoryCardStore:
    """CardStore backed by the deck and card repositories."""

    def __init__(
        self,
        deck_repo: DeckRepository,
        card_repo: CardRepository,
        now: Callable[[], datetime] = utc_now,
        default_limit: int = DEFAULT_DUE_LIMIT,
        max_limit: int = MAX_DUE_LIMIT,
    ):
        self._deck_repo = deck_repo
        self._card_repo = card_repo
        self._now = now
        self._default_limit = default_limit
        self._max_limit = max_limit

    async def create_deck(self, deck_create: DeckCreate) -> Deck:
        with _store_errors():
            return self._deck_repo.create(deck_create)

    async def add_card(self, deck_id: str, user_id: str, card_create: CardCreate) -> Card:
        with _store_errors():
            deck = self._deck_repo.get_by_id(deck_id, user_id)
            return self._card_repo.create(deck, card_create)

    async def get_due_cards(
        self,
        user_id: str,
        deck_id: str | None = None,
        limit: int | None = None,
        course_id: str | None = None,
    ) -> DueQueue[Card]:
        with _store_errors():
            return fetch_due_cards(
                self._deck_repo,
                self._card_repo,
                user_id,
                resolve_limit(limit, self._default_limit, self._max_limit),
                self._now(),
                deck_id=deck_id,
                course_id=course_id,
            )

    async def submit_review(self, review: ReviewSubmission) -> Card:
        with _store_errors():
            return submit_review(self._deck_repo, self._card_repo, review, self._now())


def get_card_store() -> RepositoryCardStore:
    """Build a card store over the repository singletons."""
    settings = get_app_settings()
    return RepositoryCardStore(
        get_deck_repository(),
        get_card_repository(),
        default_limit=settings.due_cards_default_limit,
        max_limit=settings.due_cards_max_limit,
    )
