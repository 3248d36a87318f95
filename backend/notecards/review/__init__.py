"""Review sessions and the review flow built on the SM-2 scheduler."""

from .session_store import ReviewSessionState, ReviewSessionStore
from .service import NoActiveSessionError, ReviewService, ReviewSessionHistory, ReviewStatsStore

__all__ = [
    "ReviewSessionState",
    "ReviewSessionStore",
    "NoActiveSessionError",
    "ReviewService",
    "ReviewSessionHistory",
    "ReviewStatsStore",
]
