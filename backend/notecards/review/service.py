"""Review flow: queue building, sessions and applying review outcomes."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Protocol, get_args

from notecards.config import Settings, get_settings
from notecards.models import ReviewCard, ReviewResult, ReviewSession, ReviewStatistics, ReviewStats
from notecards.repositories import ReviewStatsNotFoundError
from notecards.review.session_store import ReviewSessionState, ReviewSessionStore
from notecards.srs.sm2 import create_initial_review_stats, is_due, record_review, retention_percentage
from notecards.srs.time import Clock, utc_datetime_to_iso_z, utc_now

logger = logging.getLogger(__name__)


class NoActiveSessionError(Exception):
    """Raised when a review operation needs an active session (and card)."""

    pass


class ReviewStatsStore(Protocol):
    """Stats store contract; implemented by ReviewStatsRepository."""

    async def get(self, notecard_id: str, user_id: str) -> ReviewStats: ...

    async def list_by_user(self, user_id: str) -> list[ReviewStats]: ...

    async def list_due(self, user_id: str, now_iso: str, limit: int = 50) -> list[ReviewStats]: ...

    async def create(self, notecard_id: str, user_id: str, now: datetime) -> ReviewStats: ...

    async def replace(self, stats: ReviewStats) -> ReviewStats: ...

    async def delete_for_notecard(self, notecard_id: str, user_id: str) -> int: ...


class ReviewSessionHistory(Protocol):
    """Session store contract; implemented by ReviewSessionRepository."""

    async def create(self, session: ReviewSession) -> ReviewSession: ...

    async def replace(self, session: ReviewSession) -> ReviewSession: ...

    async def list_by_user(self, user_id: str, limit: int = 10) -> list[ReviewSession]: ...


class ReviewService:
    """Coordinates the stats store, the scheduler and active review sessions.

    ``notecard_ids`` arguments are the ids of the notecards the user
    currently owns; the notecard store itself lives elsewhere.
    """

    def __init__(
        self,
        stats_store: ReviewStatsStore,
        session_store: ReviewSessionStore,
        session_history: ReviewSessionHistory,
        clock: Clock = utc_now,
        settings: Settings | None = None,
    ):
        self._stats_store = stats_store
        self._session_store = session_store
        self._session_history = session_history
        self._clock = clock
        self._settings = settings or get_settings()

    async def link_notecard(self, notecard_id: str, user_id: str) -> ReviewStats:
        """Create default stats for a notecard, or return the existing ones."""
        try:
            return await self._stats_store.get(notecard_id, user_id)
        except ReviewStatsNotFoundError:
            return await self._stats_store.create(notecard_id, user_id, self._clock())

    async def unlink_notecard(self, notecard_id: str, user_id: str) -> int:
        """Drop the stats of a deleted notecard."""
        deleted = await self._stats_store.delete_for_notecard(notecard_id, user_id)
        logger.info(f"Review stats removed: user={user_id}, notecard={notecard_id}, count={deleted}")
        return deleted

    async def load_review_queue(self, user_id: str, notecard_ids: Iterable[str]) -> list[ReviewCard]:
        """Due cards first (most overdue first), then new cards to fill the queue.

        New cards get temporary stats that are only saved once reviewed.
        """
        owned = list(dict.fromkeys(notecard_ids))
        owned_set = set(owned)
        now = self._clock()

        due_stats = await self._stats_store.list_due(
            user_id,
            utc_datetime_to_iso_z(now),
            limit=self._settings.due_card_limit,
        )
        queue = [
            ReviewCard(notecardId=stats.notecardId, reviewStats=stats)
            for stats in due_stats
            if stats.notecardId in owned_set
        ]

        new_slots = max(0, self._settings.new_card_limit - len(queue))
        if new_slots:
            linked = {stats.notecardId for stats in await self._stats_store.list_by_user(user_id)}
            fresh = [notecard_id for notecard_id in owned if notecard_id not in linked]
            for notecard_id in fresh[:new_slots]:
                queue.append(
                    ReviewCard(
                        notecardId=notecard_id,
                        reviewStats=create_initial_review_stats(notecard_id, user_id, now),
                        isNew=True,
                    )
                )

        return queue

    async def start_session(self, user_id: str, notecard_ids: Iterable[str]) -> ReviewSessionState:
        queue = await self.load_review_queue(user_id, notecard_ids)
        session = await self._session_history.create(
            ReviewSession(userId=user_id, startTime=utc_datetime_to_iso_z(self._clock()))
        )
        state = self._session_store.start(user_id, queue, session)
        logger.info(f"Review session started: user={user_id}, session={session.id}, cards={len(queue)}")
        return state

    def get_session(self, user_id: str) -> ReviewSessionState | None:
        return self._session_store.get(user_id)

    def show_answer(self, user_id: str) -> ReviewSessionState:
        state = self._require_session(user_id)
        state.show_answer = True
        self._session_store.update(user_id, state)
        return state

    async def next_card(self, user_id: str) -> ReviewSessionState | None:
        """Advance to the next card; ends the session (returns None) at the end of the queue."""
        state = self._require_session(user_id)
        if state.advance():
            self._session_store.update(user_id, state)
            return state
        await self.end_session(user_id)
        return None

    def go_to_card(self, user_id: str, index: int) -> ReviewSessionState:
        state = self._require_session(user_id)
        if state.go_to(index):
            self._session_store.update(user_id, state)
        return state

    async def submit_review(self, user_id: str, result: ReviewResult) -> ReviewStats:
        """Apply a review outcome to the current card, persist it and move on.

        New cards are linked first. Counters on the card and on the session
        are incremented exactly once per call.
        """
        if result not in get_args(ReviewResult):
            raise ValueError(f"result must be 'correct' or 'wrong', got {result!r}")

        state = self._require_session(user_id)
        card = state.current_card
        if card is None:
            raise NoActiveSessionError(f"No card to review for user {user_id}")

        now = self._clock()
        stats = card.reviewStats
        if card.isNew:
            # The card may have been linked since the queue was built
            stats = await self.link_notecard(card.notecardId, user_id)

        updated = await self._stats_store.replace(record_review(stats, result, now))

        state.record_result(result, ReviewCard(notecardId=card.notecardId, reviewStats=updated))
        state.session = await self._session_history.replace(state.session)
        logger.info(
            f"Review recorded: user={user_id}, notecard={card.notecardId}, result={result}, "
            f"interval={updated.intervalDays}d, next_review={updated.nextReviewDate}"
        )

        await self.next_card(user_id)
        return updated

    async def end_session(self, user_id: str) -> ReviewSession | None:
        """Close the active session and return it with its end time, if any."""
        state = self._session_store.reset(user_id)
        if state is None:
            return None

        session = await self._session_history.replace(
            state.session.model_copy(update={"endTime": utc_datetime_to_iso_z(self._clock())})
        )
        logger.info(
            f"Review session ended: user={user_id}, session={session.id}, "
            f"reviewed={session.cardsReviewed}, correct={session.cardsCorrect}"
        )
        return session

    async def get_statistics(self, user_id: str, notecard_ids: Iterable[str]) -> ReviewStatistics:
        owned = set(notecard_ids)
        all_stats = [s for s in await self._stats_store.list_by_user(user_id) if s.notecardId in owned]
        linked = {s.notecardId for s in all_stats}
        now = self._clock()

        return ReviewStatistics(
            totalCards=len(owned),
            dueCards=sum(1 for s in all_stats if is_due(s, now)),
            newCards=len(owned - linked),
            retentionRate=retention_percentage(
                sum(s.correctReviews for s in all_stats),
                sum(s.totalReviews for s in all_stats),
            ),
        )

    async def list_sessions(self, user_id: str, limit: int = 10) -> list[ReviewSession]:
        """Recent review sessions of a user, newest first."""
        return await self._session_history.list_by_user(user_id, limit=limit)

    def _require_session(self, user_id: str) -> ReviewSessionState:
        state = self._session_store.get(user_id)
        if state is None:
            raise NoActiveSessionError(f"No active review session for user {user_id}")
        return state
