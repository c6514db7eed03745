"""Cards API router."""

from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, Query, status
from memorycards.auth import CurrentUser, ensure_same_user, get_current_user
from memorycards.models import (
    AddCardRequest,
    BatchAddCardsRequest,
    BatchAddCardsResponse,
    Card,
    CardCreate,
    CardEnvelope,
    CardListResponse,
    CardResponse,
    CardUpdate,
    Deck,
)
from memorycards.repositories import (
    CardNotFoundError,
    DeckNotFoundError,
    get_card_repository,
    get_deck_repository,
)

router = APIRouter(prefix="/memory-cards", tags=["cards"])


def _get_deck(deck_id: str, user_id: str) -> Deck:
    try:
        return get_deck_repository().get_by_id(deck_id, user_id)
    except DeckNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Deck with ID {deck_id} not found",
        )


def _get_card_in_deck(deck_id: str, card_id: str, user_id: str) -> Card:
    try:
        card = get_card_repository().get_by_id(card_id, user_id)
    except CardNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Card with ID {card_id} not found",
        )
    if card.deckId != deck_id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Card with ID {card_id} not found in deck {deck_id}",
        )
    return card


@router.get("/users/{user_id}/decks/{deck_id}/cards", response_model=CardListResponse)
async def list_cards(
    user_id: str, deck_id: str, user: Annotated[CurrentUser, Depends(get_current_user)]
) -> CardListResponse:
    """List all cards in a deck."""
    ensure_same_user(user, user_id)
    _get_deck(deck_id, user_id)

    cards = get_card_repository().list_by_deck(deck_id, user_id)
    return CardListResponse(
        cards=[CardResponse(**card.model_dump()) for card in cards],
        count=len(cards),
    )


@router.post("/decks/{deck_id}/cards", response_model=CardEnvelope, status_code=status.HTTP_201_CREATED)
async def add_card(
    deck_id: str, request: AddCardRequest, user: Annotated[CurrentUser, Depends(get_current_user)]
) -> CardEnvelope:
    """Add a card to a deck. The new card is due immediately."""
    ensure_same_user(user, request.userId, "deck modification")
    deck = _get_deck(deck_id, request.userId)

    card_create = CardCreate(**request.model_dump(exclude={"userId"}))
    card = get_card_repository().create(deck, card_create)
    return CardEnvelope(message="Card added successfully", data=CardResponse(**card.model_dump()))


@router.post(
    "/decks/{deck_id}/cards/batch",
    response_model=BatchAddCardsResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_cards_batch(
    deck_id: str, request: BatchAddCardsRequest, user: Annotated[CurrentUser, Depends(get_current_user)]
) -> BatchAddCardsResponse:
    """Add several cards to a deck at once."""
    ensure_same_user(user, request.userId, "deck modification")
    deck = _get_deck(deck_id, request.userId)

    cards = get_card_repository().create_many(deck, request.cards)
    return BatchAddCardsResponse(
        message="Cards added successfully",
        data=[CardResponse(**card.model_dump()) for card in cards],
        cardsAdded=len(cards),
    )


@router.put("/decks/{deck_id}/cards/{card_id}", response_model=CardEnvelope)
async def update_card(
    deck_id: str,
    card_id: str,
    card_update: CardUpdate,
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CardEnvelope:
    """Update the question, answer or difficulty of a card."""
    ensure_same_user(user, card_update.userId, "card modification")
    _get_card_in_deck(deck_id, card_id, card_update.userId)

    card = get_card_repository().update(card_id, card_update.userId, card_update)
    return CardEnvelope(message="Card updated successfully", data=CardResponse(**card.model_dump()))


@router.delete("/decks/{deck_id}/cards/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_card(
    deck_id: str,
    card_id: str,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    user_id: str = Query(..., alias="userId"),
) -> None:
    """Delete a card."""
    ensure_same_user(user, user_id, "card deletion")
    _get_card_in_deck(deck_id, card_id, user_id)

    try:
        get_card_repository().delete(card_id, user_id)
    except CardNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Card with ID {card_id} not found",
        )
