"""Application wiring: settings, logging, storage and services with an explicit lifecycle."""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator

from notecards.autosave import SaveCoordinator
from notecards.config import Settings, get_settings
from notecards.db import close_client, get_settings as get_cosmos_settings, verify_connection
from notecards.repositories import ReviewSessionRepository, ReviewStatsRepository
from notecards.review import ReviewService, ReviewSessionHistory, ReviewSessionStore, ReviewStatsStore
from notecards.srs.time import Clock, utc_now

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Initialise standard logging for the process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@dataclass
class AppContext:
    """Explicit dependencies handed to whatever drives the core (UI, tests)."""

    settings: Settings
    stats_repository: ReviewStatsStore
    session_repository: ReviewSessionHistory
    session_store: ReviewSessionStore
    review_service: ReviewService
    clock: Clock = utc_now
    coordinators: list[SaveCoordinator] = field(default_factory=list)

    def create_save_coordinator(self, initial_value: Any, persist, **options) -> SaveCoordinator:
        """Open an autosaved buffer; it is closed with the context."""
        options.setdefault("delay_ms", self.settings.autosave_delay_ms)
        options.setdefault("save_on_every_change", self.settings.autosave_on_every_change)
        coordinator = SaveCoordinator(initial_value, persist, **options)
        self.coordinators.append(coordinator)
        return coordinator

    def close(self) -> None:
        for coordinator in self.coordinators:
            coordinator.close()
        self.coordinators.clear()
        self.session_store.clear()


def build_context(
    settings: Settings | None = None,
    stats_repository: ReviewStatsStore | None = None,
    session_repository: ReviewSessionHistory | None = None,
    clock: Clock = utc_now,
) -> AppContext:
    settings = settings or get_settings()
    stats_repository = stats_repository or ReviewStatsRepository()
    session_repository = session_repository or ReviewSessionRepository()
    session_store = ReviewSessionStore(ttl_seconds=settings.session_ttl_seconds)
    review_service = ReviewService(stats_repository, session_store, session_repository, clock=clock, settings=settings)
    return AppContext(
        settings=settings,
        stats_repository=stats_repository,
        session_repository=session_repository,
        session_store=session_store,
        review_service=review_service,
        clock=clock,
    )


@asynccontextmanager
async def lifespan(
    settings: Settings | None = None,
    stats_repository: ReviewStatsStore | None = None,
    session_repository: ReviewSessionHistory | None = None,
    clock: Clock = utc_now,
) -> AsyncIterator[AppContext]:
    # Startup
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    cosmos_settings = get_cosmos_settings()
    if stats_repository is None or session_repository is None:
        if cosmos_settings.is_configured():
            if verify_connection():
                logger.info("Connected to Cosmos DB")
            else:
                logger.error("Failed to connect to Cosmos DB - check configuration")
        else:
            logger.warning("Cosmos DB not configured (COSMOS_ENDPOINT/COSMOS_EMULATOR not set)")

    context = build_context(settings, stats_repository, session_repository, clock)
    try:
        yield context
    finally:
        # Shutdown
        context.close()
        close_client()
        logger.info("Cosmos DB connection closed")
