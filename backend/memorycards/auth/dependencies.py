"""FastAPI dependencies for caller identity.

Authentication itself happens in front of this service; requests arrive with the
authenticated user in the X-User-Id header.
"""

from fastapi import Header, HTTPException, status
from pydantic import BaseModel


class CurrentUser(BaseModel):
    """The caller, as identified by the X-User-Id header."""

    user_id: str


async def get_current_user(
    x_user_id: str | None = Header(None, description="Authenticated user ID"),
) -> CurrentUser:
    """Return the calling user, or 401 when no identity was supplied."""
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    return CurrentUser(user_id=x_user_id)


def ensure_same_user(user: CurrentUser, user_id: str, action: str = "access") -> None:
    """Reject requests that act on another user's decks or cards."""
    if user.user_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Unauthorized {action}",
        )
