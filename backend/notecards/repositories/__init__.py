"""Repositories module for data access layer."""

from .review_stats_repository import (
    ReviewStatsRepository,
    ReviewStatsNotFoundError,
)
from .review_session_repository import (
    ReviewSessionRepository,
    ReviewSessionNotFoundError,
)

__all__ = [
    "ReviewStatsRepository",
    "ReviewStatsNotFoundError",
    "ReviewSessionRepository",
    "ReviewSessionNotFoundError",
]
