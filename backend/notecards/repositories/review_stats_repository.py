"""Repository for per-notecard review stats."""

from datetime import datetime
from azure.cosmos import ContainerProxy
from azure.cosmos.exceptions import CosmosResourceNotFoundError

from notecards.db import get_review_stats_container
from notecards.models import ReviewStats
from notecards.srs.sm2 import create_initial_review_stats


class ReviewStatsNotFoundError(Exception):
    """Raised when review stats are not found."""

    pass


class ReviewStatsRepository:
    """Repository for ReviewStats database operations (partition key: userId)."""

    def __init__(self, container: ContainerProxy | None = None):
        """Initialize the repository with an optional container."""
        self._container = container

    @property
    def container(self) -> ContainerProxy:
        """Get the container, lazily initializing if needed."""
        if self._container is None:
            self._container = get_review_stats_container()
        return self._container

    async def get(self, notecard_id: str, user_id: str) -> ReviewStats:
        """Get the stats of a notecard for a user."""
        query = "SELECT TOP 1 * FROM c WHERE c.notecardId = @notecardId AND c.userId = @userId"
        parameters = [
            {"name": "@notecardId", "value": notecard_id},
            {"name": "@userId", "value": user_id},
        ]

        items = list(
            self.container.query_items(
                query=query,
                parameters=parameters,
                partition_key=user_id,
            )
        )
        if not items:
            raise ReviewStatsNotFoundError(f"Review stats for notecard {notecard_id} not found")
        return ReviewStats(**items[0])

    async def list_by_user(self, user_id: str) -> list[ReviewStats]:
        """List all review stats of a user."""
        query = "SELECT * FROM c WHERE c.userId = @userId"
        parameters = [{"name": "@userId", "value": user_id}]

        items = list(
            self.container.query_items(
                query=query,
                parameters=parameters,
                partition_key=user_id,
            )
        )
        return [ReviewStats(**item) for item in items]

    async def list_due(self, user_id: str, now_iso: str, limit: int = 50) -> list[ReviewStats]:
        """List stats due at ``now_iso``, most overdue first."""
        query = (
            "SELECT TOP @limit * FROM c "
            "WHERE c.userId = @userId AND c.nextReviewDate <= @nowIso "
            "ORDER BY c.nextReviewDate ASC"
        )
        parameters = [
            {"name": "@limit", "value": limit},
            {"name": "@userId", "value": user_id},
            {"name": "@nowIso", "value": now_iso},
        ]

        items = list(
            self.container.query_items(
                query=query,
                parameters=parameters,
                partition_key=user_id,
            )
        )
        return [ReviewStats(**item) for item in items]

    async def create(self, notecard_id: str, user_id: str, now: datetime) -> ReviewStats:
        """Link a notecard to review with default stats."""
        stats = create_initial_review_stats(notecard_id, user_id, now)
        created_item = self.container.create_item(body=stats.model_dump())
        return ReviewStats(**created_item)

    async def replace(self, stats: ReviewStats) -> ReviewStats:
        """Replace (persist) a full stats document."""
        try:
            updated_item = self.container.replace_item(
                item=stats.id,
                body=stats.model_dump(),
            )
        except CosmosResourceNotFoundError:
            raise ReviewStatsNotFoundError(f"Review stats with ID {stats.id} not found")
        return ReviewStats(**updated_item)

    async def delete_for_notecard(self, notecard_id: str, user_id: str) -> int:
        """Delete the stats of a notecard (cascade on notecard deletion). Returns count deleted."""
        query = "SELECT c.id FROM c WHERE c.notecardId = @notecardId AND c.userId = @userId"
        parameters = [
            {"name": "@notecardId", "value": notecard_id},
            {"name": "@userId", "value": user_id},
        ]

        items = list(
            self.container.query_items(
                query=query,
                parameters=parameters,
                partition_key=user_id,
            )
        )
        for item in items:
            self.container.delete_item(item=item["id"], partition_key=user_id)
        return len(items)
