"""SM-2 scheduling over a binary (correct / wrong) review outcome.

The scheduler only moves the SM-2 state (easiness factor, repetitions,
interval) and the next due date. Review counters and ``lastReviewDate`` are
updated by ``record_review``, which is what callers persisting a review
should use.
"""

from __future__ import annotations

import math
from datetime import datetime

from notecards.models.review import (
    MAX_EASINESS_FACTOR,
    MIN_EASINESS_FACTOR,
    ReviewResult,
    ReviewStats,
)
from notecards.srs.time import add_days_iso, parse_iso_z, utc_datetime_to_iso_z


EASINESS_STEP_UP = 0.1
EASINESS_STEP_DOWN = 0.2


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_next_review(stats: ReviewStats, outcome: ReviewResult, now: datetime) -> ReviewStats:
    """Return a copy of ``stats`` scheduled for its next review.

    Rules:
    - correct: repetitions += 1
        if repetitions == 1: intervalDays = 1
        if repetitions == 2: intervalDays = 6
        else: intervalDays = round(previousIntervalDays * previousEF)
      EF' = min(2.5, EF + 0.1)
    - wrong: repetitions = 0, intervalDays = 1, EF' = max(1.3, EF - 0.2)
    - nextReviewDate = now + intervalDays (calendar days)

    totalReviews / correctReviews are left untouched.
    """
    ef = stats.easinessFactor
    reps = stats.repetitions
    interval = stats.intervalDays

    if outcome == "correct":
        reps_prime = reps + 1
        if reps_prime == 1:
            interval_prime = 1
        elif reps_prime == 2:
            interval_prime = 6
        else:
            interval_prime = max(1, _round_half_up(interval * ef))
        ef_prime = min(MAX_EASINESS_FACTOR, ef + EASINESS_STEP_UP)
    elif outcome == "wrong":
        reps_prime = 0
        interval_prime = 1
        ef_prime = max(MIN_EASINESS_FACTOR, ef - EASINESS_STEP_DOWN)
    else:
        raise ValueError(f"outcome must be 'correct' or 'wrong', got {outcome!r}")

    return stats.model_copy(
        update={
            "easinessFactor": ef_prime,
            "repetitions": reps_prime,
            "intervalDays": interval_prime,
            "nextReviewDate": add_days_iso(now, interval_prime),
        }
    )


def record_review(stats: ReviewStats, outcome: ReviewResult, now: datetime) -> ReviewStats:
    """Schedule the next review and count this one.

    This is the only place totalReviews / correctReviews are incremented.
    """
    scheduled = compute_next_review(stats, outcome, now)
    now_iso = utc_datetime_to_iso_z(now)
    return scheduled.model_copy(
        update={
            "lastReviewDate": now_iso,
            "updatedAt": now_iso,
            "totalReviews": stats.totalReviews + 1,
            "correctReviews": stats.correctReviews + (1 if outcome == "correct" else 0),
        }
    )


def create_initial_review_stats(notecard_id: str, user_id: str, now: datetime) -> ReviewStats:
    """Stats for a notecard that was just linked to review; due immediately."""
    now_iso = utc_datetime_to_iso_z(now)
    return ReviewStats(
        notecardId=notecard_id,
        userId=user_id,
        createdAt=now_iso,
        updatedAt=now_iso,
        nextReviewDate=now_iso,
    )


def is_due(stats: ReviewStats, now: datetime) -> bool:
    return now >= parse_iso_z(stats.nextReviewDate)


def is_new(stats: ReviewStats) -> bool:
    return stats.totalReviews == 0


def retention_percentage(correct_reviews: int, total_reviews: int) -> float:
    """Percentage of correct reviews, 0 when there were none."""
    if total_reviews == 0:
        return 0.0
    return correct_reviews / total_reviews * 100


def retention_rate(stats: ReviewStats) -> float:
    """Retention of a single card."""
    return retention_percentage(stats.correctReviews, stats.totalReviews)


def interval_description(interval_days: int) -> str:
    """Human readable interval, e.g. '6 days', '2 weeks', '1 month'."""
    if interval_days == 1:
        return "1 day"
    if interval_days < 7:
        return f"{interval_days} days"
    if interval_days < 30:
        weeks = _round_half_up(interval_days / 7)
        return "1 week" if weeks == 1 else f"{weeks} weeks"
    months = _round_half_up(interval_days / 30)
    return "1 month" if months == 1 else f"{months} months"
