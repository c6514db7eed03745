"""Cosmos DB access for the decks and cards containers."""

from .cosmos import (
    get_decks_container,
    get_cards_container,
    get_settings,
    verify_connection,
    close_client,
)

__all__ = [
    "get_decks_container",
    "get_cards_container",
    "get_settings",
    "verify_connection",
    "close_client",
]
