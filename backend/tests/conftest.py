"""Pytest configuration and fixtures."""

from dataclasses import dataclass, field
from datetime import datetime, timezone

import pytest

from memorycards.models import Card, CardCreate, CardUpdate, Deck, DeckCreate
from memorycards.repositories import CardNotFoundError, DeckNotFoundError
from memorycards.review import RepositoryCardStore, reset_session_store
from memorycards.srs.queue import select_due_cards
from memorycards.srs.scheduler import DEFAULT_CONFIG, SchedulerConfig


USER_ID = "user-1"
NOW = datetime(2025, 12, 13, 12, 0, 0, tzinfo=timezone.utc)
NOW_ISO = "2025-12-13T12:00:00Z"


@dataclass
class InMemoryDeckRepo:
    decks: dict[str, Deck] = field(default_factory=dict)

    def list_by_user(self, user_id: str) -> list[Deck]:
        return [deck for deck in self.decks.values() if deck.userId == user_id]

    def get_by_id(self, deck_id: str, user_id: str) -> Deck:
        deck = self.decks.get(deck_id)
        if deck is None or deck.userId != user_id:
            raise DeckNotFoundError(f"Deck with ID {deck_id} not found")
        return deck

    def create(self, deck_create: DeckCreate) -> Deck:
        deck = Deck(
            userId=deck_create.userId,
            courseId=deck_create.courseId,
            title=deck_create.title,
            description=deck_create.description or f"Memory cards for {deck_create.title}",
            intervalModifier=deck_create.intervalModifier,
            easyBonus=deck_create.easyBonus,
        )
        self.decks[deck.deckId] = deck
        return deck

    def record_review(self, deck_id: str, user_id: str, correct: bool) -> Deck:
        deck = self.get_by_id(deck_id, user_id)
        deck.totalReviews += 1
        if correct:
            deck.correctReviews += 1
        return deck

    def delete(self, deck_id: str, user_id: str) -> None:
        self.get_by_id(deck_id, user_id)
        del self.decks[deck_id]

    def exists(self, deck_id: str, user_id: str) -> bool:
        try:
            self.get_by_id(deck_id, user_id)
            return True
        except DeckNotFoundError:
            return False


@dataclass
class InMemoryCardRepo:
    cards: dict[str, Card] = field(default_factory=dict)
    review_calls: int = 0

    def add(self, card: Card) -> Card:
        self.cards[card.cardId] = card
        return card

    def list_by_deck(self, deck_id: str, user_id: str) -> list[Card]:
        return [c for c in self.cards.values() if c.deckId == deck_id and c.userId == user_id]

    def get_by_id(self, card_id: str, user_id: str) -> Card:
        card = self.cards.get(card_id)
        if card is None or card.userId != user_id:
            raise CardNotFoundError(f"Card with ID {card_id} not found")
        return card

    def create(self, deck: Deck, card_create: CardCreate) -> Card:
        return self.add(
            Card(deckId=deck.deckId, userId=deck.userId, courseId=deck.courseId, **card_create.model_dump())
        )

    def create_many(self, deck: Deck, card_creates: list[CardCreate]) -> list[Card]:
        return [self.create(deck, card_create) for card_create in card_creates]

    def update(self, card_id: str, user_id: str, card_update: CardUpdate) -> Card:
        existing = self.get_by_id(card_id, user_id)
        data = card_update.model_dump(exclude_unset=True, exclude_none=True, exclude={"userId"})
        return self.add(existing.model_copy(update=data))

    def get_due_cards(self, user_id, now_iso, limit, deck_id=None, course_id=None):
        candidates = [
            c
            for c in self.cards.values()
            if c.userId == user_id
            and (deck_id is None or c.deckId == deck_id)
            and (course_id is None or c.courseId == course_id)
        ]
        return select_due_cards(candidates, now_iso, limit)

    def count_due_for_deck(self, user_id: str, deck_id: str, now_iso: str) -> int:
        return self.get_due_cards(user_id, now_iso, 10_000, deck_id=deck_id).total_due

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
        self.review_calls += 1
        card = self.get_by_id(card_id, user_id)
        if card.deckId != deck_id:
            raise CardNotFoundError(f"Card with ID {card_id} not found in deck {deck_id}")
        return self.add(card.reviewed(rating, now, config, review_id=review_id))

    def delete(self, card_id: str, user_id: str) -> None:
        self.get_by_id(card_id, user_id)
        del self.cards[card_id]

    def delete_by_deck(self, deck_id: str, user_id: str) -> int:
        doomed = self.list_by_deck(deck_id, user_id)
        for card in doomed:
            del self.cards[card.cardId]
        return len(doomed)


def make_deck(deck_id: str = "deck-1", user_id: str = USER_ID, course_id: str = "course-1", **kwargs) -> Deck:
    return Deck(deckId=deck_id, userId=user_id, courseId=course_id, title="Geography", **kwargs)


def make_card(
    card_id: str,
    next_review_due: str = NOW_ISO,
    deck_id: str = "deck-1",
    user_id: str = USER_ID,
    course_id: str = "course-1",
    **kwargs,
) -> Card:
    return Card(
        cardId=card_id,
        deckId=deck_id,
        userId=user_id,
        courseId=course_id,
        question=f"Question {card_id}",
        answer=f"Answer {card_id}",
        nextReviewDue=next_review_due,
        **kwargs,
    )


@pytest.fixture
def deck_repo() -> InMemoryDeckRepo:
    repo = InMemoryDeckRepo()
    deck = make_deck()
    repo.decks[deck.deckId] = deck
    return repo


@pytest.fixture
def card_repo() -> InMemoryCardRepo:
    return InMemoryCardRepo()


@pytest.fixture
def card_store(deck_repo, card_repo) -> RepositoryCardStore:
    return RepositoryCardStore(deck_repo, card_repo, now=lambda: NOW)


@pytest.fixture
def stub_repositories(monkeypatch, deck_repo, card_repo, card_store):
    """Route every API module to the in-memory repositories."""
    from memorycards.routers import cards, decks, reviews, sessions

    for module in (cards, decks, reviews):
        monkeypatch.setattr(module, "get_deck_repository", lambda: deck_repo)
        monkeypatch.setattr(module, "get_card_repository", lambda: card_repo)
    monkeypatch.setattr(reviews, "utc_now", lambda: NOW)
    monkeypatch.setattr(decks, "utc_now_iso", lambda: NOW_ISO)
    monkeypatch.setattr(sessions, "get_card_store", lambda: card_store)

    reset_session_store()
    yield deck_repo, card_repo
    reset_session_store()
