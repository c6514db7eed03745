"""HTTP client for the memory-cards API.

Implements the CardStore contract over REST so a review session can run in a
separate process from the service.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from memorycards.models import Card, CardCreate, Deck, DeckCreate, ReviewSubmission
from memorycards.srs.queue import DueQueue

from .store import CardStoreError

logger = logging.getLogger(__name__)

API_PREFIX = "/memory-cards"
UNREACHABLE_MESSAGE = "Could not reach the memory card service"


class MemoryCardsClient:
    """Async REST client; every failure is raised as CardStoreError."""

    def __init__(
        self,
        base_url: str,
        user_id: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.user_id = user_id
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + API_PREFIX,
            headers={"X-User-Id": user_id},
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "MemoryCardsClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise CardStoreError(
                f"{method} {path} failed: {e}",
                data={"message": UNREACHABLE_MESSAGE},
            ) from e

        if response.is_error:
            try:
                data = response.json()
            except ValueError:
                data = {"message": response.text}
            raise CardStoreError(
                f"{method} {path} returned {response.status_code}",
                status=response.status_code,
                data=data,
            )

        if not response.content:
            return {}
        return response.json()

    async def create_deck(self, deck_create: DeckCreate) -> Deck:
        body = await self._request("POST", "/decks", json=deck_create.model_dump())
        return Deck(**body["data"])

    async def add_card(self, deck_id: str, user_id: str, card_create: CardCreate) -> Card:
        body = await self._request(
            "POST",
            f"/decks/{deck_id}/cards",
            json={**card_create.model_dump(), "userId": user_id},
        )
        return Card(**body["data"])

    async def get_due_cards(
        self,
        user_id: str,
        deck_id: str | None = None,
        limit: int | None = None,
        course_id: str | None = None,
    ) -> DueQueue[Card]:
        params = {
            key: value
            for key, value in (("deckId", deck_id), ("courseId", course_id), ("limit", limit))
            if value is not None
        }
        body = await self._request("GET", f"/users/{user_id}/due-cards", params=params)
        data = body["data"]
        return DueQueue(cards=[Card(**card) for card in data["dueCards"]], total_due=data["totalDue"])

    async def submit_review(self, review: ReviewSubmission) -> Card:
        body = await self._request("POST", "/reviews", json=review.model_dump())
        return Card(**body["data"]["card"])
