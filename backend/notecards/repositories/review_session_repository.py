"""Repository for finished and running review sessions."""

from azure.cosmos import ContainerProxy
from azure.cosmos.exceptions import CosmosResourceNotFoundError

from notecards.db import get_review_sessions_container
from notecards.models import ReviewSession


class ReviewSessionNotFoundError(Exception):
    """Raised when a review session is not found."""

    pass


class ReviewSessionRepository:
    """Repository for ReviewSession database operations (partition key: userId)."""

    def __init__(self, container: ContainerProxy | None = None):
        """Initialize the repository with an optional container."""
        self._container = container

    @property
    def container(self) -> ContainerProxy:
        """Get the container, lazily initializing if needed."""
        if self._container is None:
            self._container = get_review_sessions_container()
        return self._container

    async def create(self, session: ReviewSession) -> ReviewSession:
        """Store a newly started session."""
        created_item = self.container.create_item(body=session.model_dump())
        return ReviewSession(**created_item)

    async def replace(self, session: ReviewSession) -> ReviewSession:
        """Store the current counters (and end time) of a session."""
        try:
            updated_item = self.container.replace_item(
                item=session.id,
                body=session.model_dump(),
            )
        except CosmosResourceNotFoundError:
            raise ReviewSessionNotFoundError(f"Review session with ID {session.id} not found")
        return ReviewSession(**updated_item)

    async def list_by_user(self, user_id: str, limit: int = 10) -> list[ReviewSession]:
        """List the most recent sessions of a user, newest first."""
        query = "SELECT TOP @limit * FROM c WHERE c.userId = @userId ORDER BY c.startTime DESC"
        parameters = [
            {"name": "@limit", "value": limit},
            {"name": "@userId", "value": user_id},
        ]

        items = list(
            self.container.query_items(
                query=query,
                parameters=parameters,
                partition_key=user_id,
            )
        )
        return [ReviewSession(**item) for item in items]
