import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

load_dotenv()

from memorycards.config import get_app_settings  # noqa: E402
from memorycards.db import get_settings, verify_connection, close_client  # noqa: E402
from memorycards.review import get_session_store  # noqa: E402
from memorycards.routers import (  # noqa: E402
    cards_router,
    decks_router,
    reviews_router,
    sessions_router,
)

app_settings = get_app_settings()
logging.basicConfig(
    level=app_settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    settings = get_settings()

    if settings.is_configured():
        if verify_connection():
            print("✓ Connected to Cosmos DB")
        else:
            print("✗ Failed to connect to Cosmos DB - check configuration")
    else:
        print("⚠ Cosmos DB not configured (COSMOS_ENDPOINT not set, COSMOS_EMULATOR not true)")

    print(
        f"✓ Due-queue limit {app_settings.due_cards_default_limit} "
        f"(max {app_settings.due_cards_max_limit}), "
        f"review sessions expire after {app_settings.review_session_ttl_seconds}s"
    )

    yield

    # Shutdown
    get_session_store().clear()
    close_client()
    print("✓ Cosmos DB connection closed")


app = FastAPI(
    title="Memory Cards API",
    description="Spaced-repetition memory cards: decks, due queues and reviews",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(decks_router)
app.include_router(cards_router)
app.include_router(reviews_router)
app.include_router(sessions_router)


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Memory Cards API",
        "version": "1.0.0",
        "endpoints": {
            "health": "/healthz",
            "decks": "/memory-cards/decks",
            "cards": "/memory-cards/decks/{deckId}/cards",
            "dueCards": "/memory-cards/users/{userId}/due-cards",
            "reviews": "/memory-cards/reviews",
            "sessions": "/memory-cards/sessions",
        },
    }


@app.get("/healthz")
async def healthz():
    """Health check endpoint."""
    return {"status": "healthy"}
