"""Application settings loaded from environment variables."""

import os
from functools import lru_cache
from pydantic import BaseModel

from memorycards.srs.queue import DEFAULT_DUE_LIMIT, MAX_DUE_LIMIT


class AppSettings(BaseModel):
    """Review and due-queue settings."""

    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]
    due_cards_default_limit: int = DEFAULT_DUE_LIMIT
    due_cards_max_limit: int = MAX_DUE_LIMIT
    review_session_ttl_seconds: int = 30 * 60
    review_session_max: int = 10000
    log_level: str = "INFO"


@lru_cache()
def get_app_settings() -> AppSettings:
    """Get cached application settings from environment variables."""
    cors_origins = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173")
    max_limit = int(os.getenv("DUE_CARDS_MAX_LIMIT", str(MAX_DUE_LIMIT)))
    default_limit = int(os.getenv("DUE_CARDS_DEFAULT_LIMIT", str(DEFAULT_DUE_LIMIT)))

    return AppSettings(
        cors_origins=[origin.strip() for origin in cors_origins.split(",") if origin.strip()],
        due_cards_default_limit=min(default_limit, max_limit),
        due_cards_max_limit=max_limit,
        review_session_ttl_seconds=int(os.getenv("REVIEW_SESSION_TTL_SECONDS", str(30 * 60))),
        review_session_max=int(os.getenv("REVIEW_SESSION_MAX", "10000")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
