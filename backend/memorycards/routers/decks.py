"""Decks API router."""

import logging
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status
from memorycards.auth import CurrentUser, ensure_same_user, get_current_user
from memorycards.models import DeckCreate, DeckEnvelope, DeckListResponse, DeckResponse
from memorycards.repositories import DeckNotFoundError, get_card_repository, get_deck_repository
from memorycards.srs.time import utc_now_iso

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/memory-cards", tags=["decks"])


@router.post("/decks", response_model=DeckEnvelope, status_code=status.HTTP_201_CREATED)
async def create_deck(
    deck_create: DeckCreate, user: Annotated[CurrentUser, Depends(get_current_user)]
) -> DeckEnvelope:
    """Create a new deck for the current user."""
    ensure_same_user(user, deck_create.userId, "deck creation")

    deck = get_deck_repository().create(deck_create)
    return DeckEnvelope(
        message="Memory card deck created successfully",
        data=DeckResponse(**deck.model_dump(), dueCardCount=0),
    )


@router.get("/users/{user_id}/decks", response_model=DeckListResponse)
async def list_decks(
    user_id: str, user: Annotated[CurrentUser, Depends(get_current_user)]
) -> DeckListResponse:
    """List a user's decks with the number of cards due in each."""
    ensure_same_user(user, user_id)

    deck_repo = get_deck_repository()
    card_repo = get_card_repository()
    now_iso = utc_now_iso()

    decks = [
        DeckResponse(
            **deck.model_dump(),
            dueCardCount=card_repo.count_due_for_deck(user_id, deck.deckId, now_iso),
        )
        for deck in deck_repo.list_by_user(user_id)
    ]
    return DeckListResponse(decks=decks, count=len(decks))


@router.get("/users/{user_id}/decks/{deck_id}", response_model=DeckResponse)
async def get_deck(
    user_id: str, deck_id: str, user: Annotated[CurrentUser, Depends(get_current_user)]
) -> DeckResponse:
    """Get a specific deck by ID."""
    ensure_same_user(user, user_id)

    try:
        deck = get_deck_repository().get_by_id(deck_id, user_id)
    except DeckNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Deck with ID {deck_id} not found",
        )

    due_count = get_card_repository().count_due_for_deck(user_id, deck_id, utc_now_iso())
    return DeckResponse(**deck.model_dump(), dueCardCount=due_count)


@router.delete("/users/{user_id}/decks/{deck_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_deck(
    user_id: str, deck_id: str, user: Annotated[CurrentUser, Depends(get_current_user)]
) -> None:
    """Delete a deck and all its cards."""
    ensure_same_user(user, user_id, "deck deletion")

    deck_repo = get_deck_repository()
    if not deck_repo.exists(deck_id, user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Deck with ID {deck_id} not found",
        )

    deleted = get_card_repository().delete_by_deck(deck_id, user_id)
    deck_repo.delete(deck_id, user_id)
    logger.info("Deck deleted: deck=%s user=%s cards_deleted=%d", deck_id, user_id, deleted)
