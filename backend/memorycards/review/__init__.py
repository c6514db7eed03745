"""Review sessions and the card store they run against."""

from .store import (
    CardStore,
    CardStoreError,
    RepositoryCardStore,
    extract_error_message,
    get_card_store,
)
from .session import ReviewSession
from .session_store import (
    SessionNotFoundError,
    SessionStore,
    get_session_store,
    reset_session_store,
)
from .client import MemoryCardsClient

__all__ = [
    "CardStore",
    "CardStoreError",
    "RepositoryCardStore",
    "extract_error_message",
    "get_card_store",
    "ReviewSession",
    "SessionNotFoundError",
    "SessionStore",
    "get_session_store",
    "reset_session_store",
    "MemoryCardsClient",
]
