"""Database module for Cosmos DB integration."""

from .cosmos import (
    get_client,
    get_database,
    get_review_stats_container,
    get_review_sessions_container,
    get_settings,
    verify_connection,
    close_client,
)

__all__ = [
    "get_client",
    "get_database",
    "get_review_stats_container",
    "get_review_sessions_container",
    "get_settings",
    "verify_connection",
    "close_client",
]
