"""Tests for the Cosmos-backed deck and card repositories."""

from unittest.mock import MagicMock

import pytest
from azure.core import MatchConditions
from azure.cosmos.exceptions import CosmosAccessConditionFailedError, CosmosResourceNotFoundError

from conftest import NOW, NOW_ISO, USER_ID, make_card, make_deck
from memorycards.models import CardCreate, CardUpdate, DeckCreate
from memorycards.repositories import (
    CardNotFoundError,
    CardRepository,
    DeckNotFoundError,
    DeckRepository,
    DeckUpdateConflictError,
    ReviewConflictError,
)
from memorycards.repositories.card_repository import MAX_REVIEW_ATTEMPTS
from memorycards.repositories.deck_repository import MAX_STATS_ATTEMPTS
from memorycards.srs.ratings import InvalidRating
from memorycards.srs.scheduler import SchedulerConfig


def card_document(card_id: str, etag: str = "etag-1", **kwargs) -> dict:
    card = make_card(card_id, **kwargs)
    return {"id": card.cardId, "_etag": etag, "_rid": "rid", **card.model_dump()}


def precondition_failed():
    return CosmosAccessConditionFailedError(status_code=412, message="Precondition failed")


def not_found():
    return CosmosResourceNotFoundError(status_code=404, message="Not found")


@pytest.fixture
def container():
    container = MagicMock()
    container.create_item.side_effect = lambda body: body
    container.replace_item.side_effect = lambda item, body, **kwargs: body
    return container


class TestDeckRepository:
    def test_create_fills_default_description(self, container):
        repo = DeckRepository(container)

        deck = repo.create(DeckCreate(userId=USER_ID, courseId="course-1", title="Rivers"))

        body = container.create_item.call_args.kwargs["body"]
        assert body["id"] == deck.deckId
        assert deck.description == "Memory cards for Rivers"
        assert deck.intervalModifier == 1.0
        assert deck.easyBonus == 1.3

    def test_get_by_id_not_found(self, container):
        container.read_item.side_effect = not_found()
        with pytest.raises(DeckNotFoundError):
            DeckRepository(container).get_by_id("missing", USER_ID)

    def test_record_review(self, container):
        container.read_item.return_value = make_deck(totalReviews=4, correctReviews=3).model_dump()
        repo = DeckRepository(container)

        deck = repo.record_review("deck-1", USER_ID, correct=False)

        assert deck.totalReviews == 5
        assert deck.correctReviews == 3

    def test_record_review_writes_with_etag(self, container):
        container.read_item.return_value = {"_etag": "d1", **make_deck().model_dump()}

        DeckRepository(container).record_review("deck-1", USER_ID, correct=True)

        kwargs = container.replace_item.call_args.kwargs
        assert kwargs["etag"] == "d1"
        assert kwargs["match_condition"] == MatchConditions.IfNotModified

    def test_record_review_retries_on_conflict(self, container):
        container.read_item.side_effect = [
            {"_etag": "d1", **make_deck(totalReviews=4).model_dump()},
            {"_etag": "d2", **make_deck(totalReviews=5).model_dump()},
        ]
        etags = []

        def replace(item, body, etag, match_condition):
            etags.append(etag)
            if len(etags) == 1:
                raise precondition_failed()
            return body

        container.replace_item.side_effect = replace

        deck = DeckRepository(container).record_review("deck-1", USER_ID, correct=True)

        assert etags == ["d1", "d2"]
        assert deck.totalReviews == 6

    def test_record_review_gives_up_after_repeated_conflicts(self, container):
        container.read_item.return_value = make_deck().model_dump()
        container.replace_item.side_effect = precondition_failed()

        with pytest.raises(DeckUpdateConflictError):
            DeckRepository(container).record_review("deck-1", USER_ID, correct=True)

        assert container.replace_item.call_count == MAX_STATS_ATTEMPTS

    def test_exists(self, container):
        repo = DeckRepository(container)
        container.read_item.return_value = make_deck().model_dump()
        assert repo.exists("deck-1", USER_ID) is True

        container.read_item.side_effect = not_found()
        assert repo.exists("deck-1", USER_ID) is False

    def test_delete_not_found(self, container):
        container.delete_item.side_effect = not_found()
        with pytest.raises(DeckNotFoundError):
            DeckRepository(container).delete("missing", USER_ID)


class TestCardRepositoryCrud:
    def test_create_denormalises_course(self, container):
        repo = CardRepository(container)
        deck = make_deck(course_id="course-9")

        card = repo.create(deck, CardCreate(question="Q", answer="A"))

        body = container.create_item.call_args.kwargs["body"]
        assert body["id"] == card.cardId
        assert card.courseId == "course-9"
        assert card.deckId == deck.deckId
        assert card.repetitionCount == 0
        assert card.lastReviewed is None

    def test_create_many_keeps_order(self, container):
        repo = CardRepository(container)
        cards = repo.create_many(make_deck(), [CardCreate(question=f"Q{i}", answer="A") for i in range(3)])
        assert [c.question for c in cards] == ["Q0", "Q1", "Q2"]

    def test_update_leaves_schedule_untouched(self, container):
        container.read_item.return_value = card_document("c1", repetitionCount=4, interval=12.0)
        repo = CardRepository(container)

        card = repo.update("c1", USER_ID, CardUpdate(userId=USER_ID, answer="New answer"))

        assert card.answer == "New answer"
        assert card.question == "Question c1"
        assert card.repetitionCount == 4
        assert card.interval == 12.0

    def test_update_without_changes_skips_write(self, container):
        container.read_item.return_value = card_document("c1")
        CardRepository(container).update("c1", USER_ID, CardUpdate(userId=USER_ID))
        container.replace_item.assert_not_called()

    def test_get_by_id_not_found(self, container):
        container.read_item.side_effect = not_found()
        with pytest.raises(CardNotFoundError):
            CardRepository(container).get_by_id("missing", USER_ID)

    def test_delete_by_deck(self, container):
        container.query_items.return_value = [card_document("c1"), card_document("c2")]

        deleted = CardRepository(container).delete_by_deck("deck-1", USER_ID)

        assert deleted == 2
        assert container.delete_item.call_count == 2


class TestCardRepositoryDueQueue:
    def test_list_due_treats_missing_due_date_as_now(self, container):
        legacy = card_document("legacy")
        legacy["nextReviewDue"] = None
        missing = card_document("missing")
        del missing["nextReviewDue"]
        container.query_items.return_value = [legacy, missing]

        cards = CardRepository(container).list_due(USER_ID, NOW_ISO)

        assert [c.nextReviewDue for c in cards] == [NOW_ISO, NOW_ISO]
        query = container.query_items.call_args.kwargs["query"]
        assert "NOT IS_DEFINED(c.nextReviewDue)" in query

    def test_list_due_filters(self, container):
        container.query_items.return_value = []

        CardRepository(container).list_due(USER_ID, NOW_ISO, deck_id="deck-1", course_id="course-1")

        kwargs = container.query_items.call_args.kwargs
        assert "c.deckId = @deckId" in kwargs["query"]
        assert "c.courseId = @courseId" in kwargs["query"]
        assert {"name": "@nowIso", "value": NOW_ISO} in kwargs["parameters"]
        assert kwargs["partition_key"] == USER_ID

    def test_get_due_cards_orders_and_caps(self, container):
        container.query_items.return_value = [
            card_document("c3", next_review_due="2025-12-12T00:00:00Z"),
            card_document("c1", next_review_due="2025-12-01T00:00:00Z"),
            card_document("c2", next_review_due="2025-12-01T00:00:00Z"),
        ]

        queue = CardRepository(container).get_due_cards(USER_ID, NOW_ISO, limit=2)

        assert [c.cardId for c in queue.cards] == ["c1", "c2"]
        assert queue.total_due == 3
        container.replace_item.assert_not_called()

    def test_count_due_for_deck(self, container):
        repo = CardRepository(container)

        container.query_items.return_value = iter([4])
        assert repo.count_due_for_deck(USER_ID, "deck-1", NOW_ISO) == 4

        container.query_items.return_value = iter([])
        assert repo.count_due_for_deck(USER_ID, "deck-1", NOW_ISO) == 0


class TestCardRepositoryReview:
    def test_apply_review_writes_with_etag(self, container):
        container.read_item.return_value = card_document("c1", etag="v1")

        card = CardRepository(container).apply_review("c1", "deck-1", USER_ID, "good", NOW)

        kwargs = container.replace_item.call_args.kwargs
        assert kwargs["etag"] == "v1"
        assert kwargs["match_condition"] == MatchConditions.IfNotModified
        assert card.repetitionCount == 1
        assert card.nextReviewDue == "2025-12-14T12:00:00Z"
        assert card.lastRating == "good"

    def test_apply_review_retries_on_conflict(self, container):
        container.read_item.side_effect = [
            card_document("c1", etag="v1"),
            card_document("c1", etag="v2", repetitionCount=1, correctCount=1),
        ]
        etags = []

        def replace(item, body, etag, match_condition):
            etags.append(etag)
            if len(etags) == 1:
                raise precondition_failed()
            return body

        container.replace_item.side_effect = replace

        card = CardRepository(container).apply_review("c1", "deck-1", USER_ID, "good", NOW)

        assert etags == ["v1", "v2"]
        assert card.repetitionCount == 2
        assert card.correctCount == 2

    def test_apply_review_gives_up_after_repeated_conflicts(self, container):
        container.read_item.return_value = card_document("c1")
        container.replace_item.side_effect = precondition_failed()

        with pytest.raises(ReviewConflictError):
            CardRepository(container).apply_review("c1", "deck-1", USER_ID, "good", NOW)

        assert container.replace_item.call_count == MAX_REVIEW_ATTEMPTS

    def test_apply_review_rejects_invalid_rating_before_reading(self, container):
        with pytest.raises(InvalidRating):
            CardRepository(container).apply_review("c1", "deck-1", USER_ID, "perfect", NOW)
        container.read_item.assert_not_called()

    def test_apply_review_wrong_deck(self, container):
        container.read_item.return_value = card_document("c1", deck_id="deck-2")

        with pytest.raises(CardNotFoundError):
            CardRepository(container).apply_review("c1", "deck-1", USER_ID, "good", NOW)
        container.replace_item.assert_not_called()

    def test_apply_review_uses_deck_config(self, container):
        container.read_item.return_value = card_document("c1")

        card = CardRepository(container).apply_review(
            "c1", "deck-1", USER_ID, "easy", NOW, SchedulerConfig(interval_modifier=0.5)
        )

        assert card.interval == pytest.approx(2.0)

    def test_apply_review_records_review_id(self, container):
        container.read_item.return_value = card_document("c1")

        card = CardRepository(container).apply_review("c1", "deck-1", USER_ID, "hard", NOW, review_id="review-7")

        assert card.lastReviewId == "review-7"
        assert container.replace_item.call_args.kwargs["body"]["lastReviewId"] == "review-7"
