"""Caller identity for the memory-cards API."""

from .dependencies import CurrentUser, ensure_same_user, get_current_user

__all__ = [
    "CurrentUser",
    "ensure_same_user",
    "get_current_user",
]
