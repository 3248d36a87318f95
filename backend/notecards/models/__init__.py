"""Models module for Pydantic schemas."""

from .review import (
    MAX_EASINESS_FACTOR,
    MIN_EASINESS_FACTOR,
    ReviewCard,
    ReviewResult,
    ReviewSession,
    ReviewStatistics,
    ReviewStats,
)

__all__ = [
    "MAX_EASINESS_FACTOR",
    "MIN_EASINESS_FACTOR",
    "ReviewCard",
    "ReviewResult",
    "ReviewSession",
    "ReviewStatistics",
    "ReviewStats",
]
