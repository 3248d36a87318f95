"""TTL-based store for active review sessions."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from cachetools import TTLCache

from notecards.models import ReviewCard, ReviewResult, ReviewSession


@dataclass
class ReviewSessionState:
    """State of a user's active review session.

    Keyed by user_id. Tracks the review queue, the card being shown and
    whether its answer has been revealed.

    Attributes:
        session: Session record with its running counters
        queue: Cards to review, due cards first
        current_index: Position of the card being shown
        show_answer: Whether the answer of the current card is revealed
    """
    session: ReviewSession
    queue: list[ReviewCard] = field(default_factory=list)
    current_index: int = 0
    show_answer: bool = False

    @property
    def current_card(self) -> ReviewCard | None:
        if 0 <= self.current_index < len(self.queue):
            return self.queue[self.current_index]
        return None

    @property
    def progress(self) -> tuple[int, int]:
        """(1-based position, queue length)."""
        return (min(self.current_index + 1, len(self.queue)), len(self.queue))

    def record_result(self, result: ReviewResult, card: ReviewCard) -> None:
        """Count a review and store the updated card in place."""
        self.session = self.session.model_copy(
            update={
                "cardsReviewed": self.session.cardsReviewed + 1,
                "cardsCorrect": self.session.cardsCorrect + (1 if result == "correct" else 0),
            }
        )
        self.queue[self.current_index] = card
        self.show_answer = False

    def advance(self) -> bool:
        """Move to the next card. Returns False when the queue is exhausted."""
        self.show_answer = False
        if self.current_index + 1 < len(self.queue):
            self.current_index += 1
            return True
        self.current_index = len(self.queue)
        return False

    def go_to(self, index: int) -> bool:
        if 0 <= index < len(self.queue):
            self.current_index = index
            self.show_answer = False
            return True
        return False


class ReviewSessionStore:
    """Thread-safe TTL-based session store.

    Stores ReviewSessionState keyed by user_id. Sessions expire after TTL
    seconds of inactivity (sliding window).
    """

    # Default TTL: 30 minutes
    DEFAULT_TTL_SECONDS = 30 * 60
    MAX_SESSIONS = 10000

    def __init__(self, ttl_seconds: int = DEFAULT_TTL_SECONDS, maxsize: int = MAX_SESSIONS):
        self._cache: TTLCache[str, ReviewSessionState] = TTLCache(maxsize=maxsize, ttl=ttl_seconds)
        self._lock = threading.Lock()

    def get(self, user_id: str) -> ReviewSessionState | None:
        """Get the active session of a user.

        Returns None if no session exists or it has expired.
        Accessing the session refreshes its TTL.
        """
        with self._lock:
            state = self._cache.get(user_id)
            if state is not None:
                self._cache[user_id] = state
            return state

    def start(self, user_id: str, queue: list[ReviewCard], session: ReviewSession) -> ReviewSessionState:
        """Start a session, replacing any active one."""
        state = ReviewSessionState(session=session, queue=list(queue))
        with self._lock:
            self._cache[user_id] = state
        return state

    def update(self, user_id: str, state: ReviewSessionState) -> None:
        """Update session state (also refreshes TTL)."""
        with self._lock:
            self._cache[user_id] = state

    def reset(self, user_id: str) -> ReviewSessionState | None:
        """Remove and return the session of a user."""
        with self._lock:
            return self._cache.pop(user_id, None)

    def clear(self) -> None:
        """Clear all sessions."""
        with self._lock:
            self._cache.clear()
