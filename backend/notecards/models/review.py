"""Review models: per-notecard SRS stats, queue entries, sessions and summaries."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, Field, model_validator


# Binary review outcome; there is no partial credit.
ReviewResult = Literal["correct", "wrong"]

MIN_EASINESS_FACTOR = 1.3
MAX_EASINESS_FACTOR = 2.5


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid4())


def utc_now_iso() -> str:
    """Get current UTC timestamp in ISO format (second precision)."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


class ReviewStats(BaseModel):
    """Spaced-repetition statistics for one notecard, owned by one user."""

    id: str = Field(default_factory=generate_uuid, description="Unique identifier")
    notecardId: str = Field(..., description="Notecard these stats belong to")
    userId: str = Field(..., description="Owner user ID (partition key)")
    createdAt: str = Field(default_factory=utc_now_iso, description="Creation timestamp")
    updatedAt: str = Field(default_factory=utc_now_iso, description="Last update timestamp")

    easinessFactor: float = Field(
        2.5,
        ge=MIN_EASINESS_FACTOR,
        le=MAX_EASINESS_FACTOR,
        description="SM-2 easiness factor",
    )
    intervalDays: int = Field(1, ge=1, description="Days until the next scheduled review")
    repetitions: int = Field(0, ge=0, description="Consecutive correct answers since the last lapse")
    nextReviewDate: str = Field(default_factory=utc_now_iso, description="Next due timestamp (UTC ISO Z)")
    lastReviewDate: str | None = Field(None, description="Last review timestamp (UTC ISO Z)")
    totalReviews: int = Field(0, ge=0, description="Number of reviews recorded")
    correctReviews: int = Field(0, ge=0, description="Number of correct reviews recorded")

    @model_validator(mode="after")
    def _check_counters(self) -> "ReviewStats":
        if self.correctReviews > self.totalReviews:
            raise ValueError("correctReviews cannot exceed totalReviews")
        return self

    class Config:
        """Pydantic config."""

        json_schema_extra = {
            "example": {
                "id": "5f0c2a52-8d8c-4d43-9a0e-5b0a3f0e9d11",
                "notecardId": "notecard-001",
                "userId": "user-001",
                "easinessFactor": 2.5,
                "intervalDays": 1,
                "repetitions": 0,
                "nextReviewDate": "2025-01-01T00:00:00Z",
                "lastReviewDate": None,
                "totalReviews": 0,
                "correctReviews": 0,
                "createdAt": "2025-01-01T00:00:00Z",
                "updatedAt": "2025-01-01T00:00:00Z",
            }
        }


class ReviewCard(BaseModel):
    """One entry of a review queue.

    New cards carry temporary stats that have not been saved yet.
    """

    notecardId: str
    reviewStats: ReviewStats
    isNew: bool = False


class ReviewSession(BaseModel):
    """A single sitting of reviews with its running counters."""

    id: str = Field(default_factory=generate_uuid, description="Unique identifier")
    userId: str = Field(..., description="Owner user ID")
    startTime: str = Field(default_factory=utc_now_iso, description="Session start (UTC ISO Z)")
    endTime: str | None = Field(None, description="Session end (UTC ISO Z)")
    cardsReviewed: int = Field(0, ge=0)
    cardsCorrect: int = Field(0, ge=0)


class ReviewStatistics(BaseModel):
    """Aggregate review figures for a user."""

    totalCards: int = Field(..., ge=0)
    dueCards: int = Field(..., ge=0)
    newCards: int = Field(..., ge=0)
    retentionRate: float = Field(..., ge=0, le=100, description="Percentage of correct reviews")
