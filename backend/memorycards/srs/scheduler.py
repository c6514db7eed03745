"""Spaced-repetition scheduling.

`apply_rating` is a pure function: it takes the current scheduling state of a
card, a rating and the review time, and returns the next state. It never mutates
its input and has no hidden randomness, so identical inputs always produce
identical outputs.

Rules (intervals in days):
- first review (repetition_count == 0) uses a fixed interval per rating:
  again 10 minutes, hard 12 hours, good 1 day, easy 4 days
- later reviews grow from base = max(previous interval, 10 minutes):
    again -> 10 minutes
    hard  -> base * 1.2
    good  -> base * EF'
    easy  -> base * EF' * easy_bonus
- EF' = EF + delta(rating), clamped to [1.3, 3.0]
  (again -0.20, hard -0.15, good 0, easy +0.15)
- every interval is multiplied by the deck's interval_modifier and capped at
  MAX_INTERVAL_DAYS (100 years)

The floor of 1.3 keeps EF' above the hard factor of 1.2, and easy_bonus > 1 keeps
easy above good, so intervals are strictly ordered again < hard < good < easy for
the same prior state until the cap is reached.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime

from .ratings import Rating, is_correct, parse_rating
from .time import add_days_iso, utc_datetime_to_iso_z


DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
MAX_EASE_FACTOR = 3.0

DEFAULT_INTERVAL_DAYS = 1.0
AGAIN_INTERVAL_DAYS = 10 / (24 * 60)
HARD_FACTOR = 1.2

# Upper bound on any interval; keeps due dates well inside datetime range
MAX_INTERVAL_DAYS = 36500.0
MAX_INTERVAL_MODIFIER = 10.0

INITIAL_INTERVAL_DAYS: dict[Rating, float] = {
    "again": AGAIN_INTERVAL_DAYS,
    "hard": 0.5,
    "good": 1.0,
    "easy": 4.0,
}

EASE_DELTAS: dict[Rating, float] = {
    "again": -0.20,
    "hard": -0.15,
    "good": 0.0,
    "easy": 0.15,
}


@dataclass(frozen=True)
class SchedulerConfig:
    """Per-deck tuning of interval growth."""

    interval_modifier: float = 1.0
    easy_bonus: float = 1.3

    def __post_init__(self) -> None:
        if not 0 < self.interval_modifier <= MAX_INTERVAL_MODIFIER:
            raise ValueError(
                f"interval_modifier must be in (0, {MAX_INTERVAL_MODIFIER}], got {self.interval_modifier}"
            )
        if self.easy_bonus <= 1:
            raise ValueError(f"easy_bonus must be > 1, got {self.easy_bonus}")


DEFAULT_CONFIG = SchedulerConfig()


@dataclass(frozen=True)
class ScheduleState:
    repetition_count: int = 0
    correct_count: int = 0
    incorrect_count: int = 0
    interval_days: float = DEFAULT_INTERVAL_DAYS
    ease_factor: float = DEFAULT_EASE_FACTOR
    last_reviewed: str | None = None
    next_review_due: str | None = None


def _clamp_ease_factor(ef: float) -> float:
    return min(MAX_EASE_FACTOR, max(MIN_EASE_FACTOR, ef))


def next_interval_days(
    state: ScheduleState,
    rating: Rating,
    ease_factor: float,
    config: SchedulerConfig = DEFAULT_CONFIG,
) -> float:
    """Interval for `rating`, given the already-adjusted ease factor."""
    if state.repetition_count == 0:
        interval = INITIAL_INTERVAL_DAYS[rating]
    elif rating == "again":
        interval = AGAIN_INTERVAL_DAYS
    else:
        base = max(state.interval_days, AGAIN_INTERVAL_DAYS)
        if rating == "hard":
            interval = base * HARD_FACTOR
        elif rating == "good":
            interval = base * ease_factor
        else:
            interval = base * ease_factor * config.easy_bonus
    return min(interval * config.interval_modifier, MAX_INTERVAL_DAYS)


def apply_rating(
    state: ScheduleState,
    rating: str,
    now: datetime,
    config: SchedulerConfig = DEFAULT_CONFIG,
) -> ScheduleState:
    """Return the scheduling state after reviewing a card with `rating` at `now`.

    Raises:
        InvalidRating: if `rating` is not one of again/hard/good/easy.
    """
    checked = parse_rating(rating)

    ease_factor = _clamp_ease_factor(_clamp_ease_factor(state.ease_factor) + EASE_DELTAS[checked])
    interval = next_interval_days(state, checked, ease_factor, config)
    correct = is_correct(checked)

    return replace(
        state,
        repetition_count=state.repetition_count + 1,
        correct_count=state.correct_count + (1 if correct else 0),
        incorrect_count=state.incorrect_count + (0 if correct else 1),
        interval_days=interval,
        ease_factor=ease_factor,
        last_reviewed=utc_datetime_to_iso_z(now),
        next_review_due=add_days_iso(now, interval),
    )
