"""Due-queue selection."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Iterable, Protocol, TypeVar


DEFAULT_DUE_LIMIT = 20
MAX_DUE_LIMIT = 100


class Schedulable(Protocol):
    cardId: str
    nextReviewDue: str


T = TypeVar("T", bound=Schedulable)


@dataclass(frozen=True)
class DueQueue(Generic[T]):
    """Due cards in review order, capped, plus the uncapped due count."""

    cards: list[T] = field(default_factory=list)
    total_due: int = 0


def is_due(card: Schedulable, now_iso: str) -> bool:
    return card.nextReviewDue <= now_iso


def resolve_limit(
    limit: int | None,
    default: int = DEFAULT_DUE_LIMIT,
    maximum: int = MAX_DUE_LIMIT,
) -> int:
    """Return the effective queue size.

    None selects the default; anything outside 1..maximum is rejected rather than
    silently widened.
    """
    if limit is None:
        return default
    if limit < 1 or limit > maximum:
        raise ValueError(f"limit must be between 1 and {maximum}, got {limit}")
    return limit


def select_due_cards(candidates: Iterable[T], now_iso: str, limit: int) -> DueQueue[T]:
    """Filter, order and cap cards for review.

    Most overdue first (ascending nextReviewDue), ties broken by ascending cardId.
    The input is not modified.
    """
    due = sorted(
        (card for card in candidates if is_due(card, now_iso)),
        key=lambda card: (card.nextReviewDue, card.cardId),
    )
    return DueQueue(cards=due[:limit], total_due=len(due))
