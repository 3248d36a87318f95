"""Application settings loaded from environment variables."""

import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, Field


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() not in ("false", "0", "no", "off")


class Settings(BaseModel):
    """Autosave and review settings."""

    autosave_delay_ms: int = Field(2500, ge=0)  # quiet period before an automatic save
    autosave_on_every_change: bool = False
    due_card_limit: int = Field(50, ge=0)  # due cards pulled into one review queue
    new_card_limit: int = Field(20, ge=0)  # queue is topped up with new cards to this size
    session_ttl_seconds: int = Field(30 * 60, gt=0)
    log_level: str = "INFO"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings from environment variables (and a local .env file)."""
    load_dotenv()

    return Settings(
        autosave_delay_ms=int(os.getenv("AUTOSAVE_DELAY_MS", "2500")),
        autosave_on_every_change=_env_bool("AUTOSAVE_ON_EVERY_CHANGE", "false"),
        due_card_limit=int(os.getenv("REVIEW_DUE_CARD_LIMIT", "50")),
        new_card_limit=int(os.getenv("REVIEW_NEW_CARD_LIMIT", "20")),
        session_ttl_seconds=int(os.getenv("REVIEW_SESSION_TTL_SECONDS", str(30 * 60))),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
