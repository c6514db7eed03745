"""Review ratings accepted by the scheduler."""

from __future__ import annotations

from typing import Literal


Rating = Literal["again", "hard", "good", "easy"]

RATINGS: tuple[Rating, ...] = ("again", "hard", "good", "easy")


class InvalidRating(ValueError):
    """Raised when a rating is not one of again/hard/good/easy."""

    def __init__(self, rating: object):
        self.rating = rating
        super().__init__(f"Invalid rating {rating!r}; expected one of: {', '.join(RATINGS)}")


def parse_rating(value: object) -> Rating:
    """Validate a raw rating value and return it as a Rating.

    Matching is exact: "Good" or " good" are rejected, as are numeric scores.
    """
    if isinstance(value, str) and value in RATINGS:
        return value  # type: ignore[return-value]
    raise InvalidRating(value)


def is_correct(rating: Rating) -> bool:
    """Only "again" counts as an incorrect answer."""
    return rating != "again"
