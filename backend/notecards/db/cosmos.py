"""
Cosmos DB client for the review stats and review session stores.

Authentication modes:
1. Azure Managed Identity / Azure CLI: DefaultAzureCredential (passwordless)
2. Cosmos DB Emulator (local dev): well-known emulator key

Set COSMOS_EMULATOR=true to use the emulator; otherwise COSMOS_ENDPOINT is
required and DefaultAzureCredential is used.
"""

import os
import logging
from functools import lru_cache
from azure.cosmos import CosmosClient, DatabaseProxy, ContainerProxy
from azure.cosmos.exceptions import CosmosHttpResponseError
from azure.identity import DefaultAzureCredential

logger = logging.getLogger(__name__)

# Cosmos DB Emulator well-known key (public, not a secret)
# https://learn.microsoft.com/en-us/azure/cosmos-db/emulator#authentication
EMULATOR_KEY = "C2y6yDjf5/R+ob0N8A7Cgv30VRDJIWEHLM+4QDU5DE2nQ9nDuVTqobD4b8mGGyPMbIZnqyMsEcaGQy67XIw/Jw=="
EMULATOR_ENDPOINT = "https://localhost:8081"


class CosmosDBSettings:
    """Settings for Cosmos DB connection."""

    def __init__(self):
        self.endpoint = os.getenv("COSMOS_ENDPOINT", "")
        self.database_name = os.getenv("COSMOS_DB_NAME", "notecards")
        self.review_stats_container = os.getenv("COSMOS_REVIEW_STATS_CONTAINER", "reviewStats")
        self.review_sessions_container = os.getenv("COSMOS_REVIEW_SESSIONS_CONTAINER", "reviewSessions")
        self.use_emulator = os.getenv("COSMOS_EMULATOR", "false").lower() == "true"

    def is_configured(self) -> bool:
        """Check if Cosmos DB is configured."""
        if self.use_emulator:
            return True
        return bool(self.endpoint)


@lru_cache()
def get_settings() -> CosmosDBSettings:
    """Get cached Cosmos DB settings."""
    return CosmosDBSettings()


_client: CosmosClient | None = None
_database: DatabaseProxy | None = None


def get_client() -> CosmosClient:
    """Get or create the Cosmos DB client."""
    global _client
    if _client is None:
        settings = get_settings()
        if not settings.is_configured():
            raise RuntimeError(
                "Cosmos DB is not configured. "
                "Set COSMOS_ENDPOINT environment variable, or COSMOS_EMULATOR=true for local emulator."
            )

        if settings.use_emulator:
            logger.info("Using Cosmos DB Emulator at %s", EMULATOR_ENDPOINT)
            _client = CosmosClient(
                EMULATOR_ENDPOINT,
                credential=EMULATOR_KEY,
                connection_verify=False  # Emulator uses self-signed cert
            )
        else:
            logger.info("Using DefaultAzureCredential for Cosmos DB at %s", settings.endpoint)
            credential = DefaultAzureCredential()
            _client = CosmosClient(settings.endpoint, credential=credential)

    return _client


def get_database() -> DatabaseProxy:
    """Get or create the database proxy."""
    global _database
    if _database is None:
        settings = get_settings()
        _database = get_client().get_database_client(settings.database_name)
    return _database


def get_review_stats_container() -> ContainerProxy:
    """Get the review stats container (partition key: /userId)."""
    settings = get_settings()
    return get_database().get_container_client(settings.review_stats_container)


def get_review_sessions_container() -> ContainerProxy:
    """Get the review sessions container (partition key: /userId)."""
    settings = get_settings()
    return get_database().get_container_client(settings.review_sessions_container)


def verify_connection() -> bool:
    """Verify the Cosmos DB connection is working."""
    settings = get_settings()
    if not settings.is_configured():
        return False
    try:
        get_database().read()
        return True
    except (CosmosHttpResponseError, RuntimeError) as e:
        logger.warning("Cosmos DB connection check failed: %s", e)
        return False


def close_client():
    """Drop client references; CosmosClient manages its own connections."""
    global _client, _database
    _client = None
    _database = None
