"""SRS helpers (SM-2 scheduling + UTC time)."""

from .sm2 import (
    compute_next_review,
    create_initial_review_stats,
    interval_description,
    is_due,
    is_new,
    record_review,
    retention_percentage,
    retention_rate,
)
from .time import (
    Clock,
    utc_now,
    utc_now_iso,
    utc_datetime_to_iso_z,
    parse_iso_z,
    add_days,
    add_days_iso,
)

__all__ = [
    "compute_next_review",
    "create_initial_review_stats",
    "interval_description",
    "is_due",
    "is_new",
    "record_review",
    "retention_percentage",
    "retention_rate",
    "Clock",
    "utc_now",
    "utc_now_iso",
    "utc_datetime_to_iso_z",
    "parse_iso_z",
    "add_days",
    "add_days_iso",
]
