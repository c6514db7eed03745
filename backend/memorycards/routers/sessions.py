"""Review session API router.

Runs the review session controller on the server for clients that do not carry
their own: start a session, flip and rate cards, and read the running summary.
"""

from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status
from memorycards.auth import CurrentUser, get_current_user
from memorycards.models import RateCardRequest, SessionResponse, StartSessionRequest
from memorycards.review import (
    ReviewSession,
    SessionNotFoundError,
    get_card_store,
    get_session_store,
)
from memorycards.srs.ratings import InvalidRating

router = APIRouter(prefix="/memory-cards/sessions", tags=["sessions"])


def _get_session(session_id: str, user: CurrentUser) -> ReviewSession:
    try:
        return get_session_store().get(session_id, user.user_id)
    except SessionNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Review session {session_id} not found",
        )


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def start_session(
    request: StartSessionRequest, user: Annotated[CurrentUser, Depends(get_current_user)]
) -> SessionResponse:
    """Snapshot the due-queue and start reviewing it.

    A failed fetch still creates the session, in the error state, so it can be
    retried.
    """
    session = ReviewSession(
        get_card_store(),
        user.user_id,
        deck_id=request.deckId,
        course_id=request.courseId,
        limit=request.limit,
    )
    await session.load()
    get_session_store().add(session)
    return session.to_response()


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str, user: Annotated[CurrentUser, Depends(get_current_user)]
) -> SessionResponse:
    return _get_session(session_id, user).to_response()


@router.post("/{session_id}/flip", response_model=SessionResponse)
async def flip_card(
    session_id: str, user: Annotated[CurrentUser, Depends(get_current_user)]
) -> SessionResponse:
    """Toggle between question and answer of the current card."""
    session = _get_session(session_id, user)
    session.flip_card()
    return session.to_response()


@router.post("/{session_id}/rate", response_model=SessionResponse)
async def rate_card(
    session_id: str,
    request: RateCardRequest,
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> SessionResponse:
    """Rate the current card and advance.

    Rating a session that is loading, failed or complete leaves it unchanged.
    A failed write is reported in persistenceError.
    """
    session = _get_session(session_id, user)
    try:
        await session.rate_card(request.rating)
    except InvalidRating as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    await session.flush()
    return session.to_response()


@router.post("/{session_id}/retry", response_model=SessionResponse)
async def retry_session(
    session_id: str, user: Annotated[CurrentUser, Depends(get_current_user)]
) -> SessionResponse:
    """Refetch a failed queue, or re-send reviews that failed to save."""
    session = _get_session(session_id, user)
    await session.retry()
    return session.to_response()


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def end_session(
    session_id: str, user: Annotated[CurrentUser, Depends(get_current_user)]
) -> None:
    """Abandon a session. Already submitted reviews stay applied."""
    try:
        get_session_store().remove(session_id, user.user_id)
    except SessionNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Review session {session_id} not found",
        )
