"""SRS core: ratings, scheduling and due-queue selection."""

from .ratings import RATINGS, InvalidRating, Rating, is_correct, parse_rating
from .scheduler import (
    DEFAULT_CONFIG,
    MAX_EASE_FACTOR,
    MIN_EASE_FACTOR,
    ScheduleState,
    SchedulerConfig,
    apply_rating,
)
from .queue import DueQueue, resolve_limit, select_due_cards
from .time import (
    utc_now,
    utc_now_iso,
    utc_datetime_to_iso_z,
    parse_iso_z,
    add_days_iso,
)

__all__ = [
    "RATINGS",
    "InvalidRating",
    "Rating",
    "is_correct",
    "parse_rating",
    "DEFAULT_CONFIG",
    "MAX_EASE_FACTOR",
    "MIN_EASE_FACTOR",
    "ScheduleState",
    "SchedulerConfig",
    "apply_rating",
    "DueQueue",
    "resolve_limit",
    "select_due_cards",
    "utc_now",
    "utc_now_iso",
    "utc_datetime_to_iso_z",
    "parse_iso_z",
    "add_days_iso",
]
