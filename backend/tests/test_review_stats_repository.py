"""Tests for the Cosmos-backed review stats repository (mocked container)."""

import asyncio
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from azure.cosmos.exceptions import CosmosResourceNotFoundError

from notecards.models import ReviewStats
from notecards.repositories import ReviewStatsNotFoundError, ReviewStatsRepository


NOW = datetime(2025, 12, 13, 9, 0, 0, tzinfo=timezone.utc)


def stats_doc(**overrides) -> dict:
    doc = ReviewStats(
        id="stats-1",
        notecardId="notecard-1",
        userId="user-1",
        nextReviewDate="2025-12-13T09:00:00Z",
    ).model_dump()
    doc.update(overrides)
    return doc


@pytest.fixture
def container():
    return MagicMock()


@pytest.fixture
def repo(container):
    return ReviewStatsRepository(container=container)


def test_get_returns_stats(repo, container):
    container.query_items.return_value = iter([stats_doc()])

    stats = asyncio.run(repo.get("notecard-1", "user-1"))

    assert stats.id == "stats-1"
    kwargs = container.query_items.call_args.kwargs
    assert kwargs["partition_key"] == "user-1"
    assert {"name": "@notecardId", "value": "notecard-1"} in kwargs["parameters"]


def test_get_missing_raises(repo, container):
    container.query_items.return_value = iter([])

    with pytest.raises(ReviewStatsNotFoundError):
        asyncio.run(repo.get("notecard-1", "user-1"))


def test_list_due_passes_now_and_limit(repo, container):
    container.query_items.return_value = iter([stats_doc(), stats_doc(id="stats-2", notecardId="notecard-2")])

    due = asyncio.run(repo.list_due("user-1", "2025-12-13T09:00:00Z", limit=10))

    assert [s.id for s in due] == ["stats-1", "stats-2"]
    kwargs = container.query_items.call_args.kwargs
    assert "ORDER BY c.nextReviewDate ASC" in kwargs["query"]
    assert {"name": "@nowIso", "value": "2025-12-13T09:00:00Z"} in kwargs["parameters"]
    assert {"name": "@limit", "value": 10} in kwargs["parameters"]


def test_create_stores_default_stats(repo, container):
    container.create_item.side_effect = lambda body: body

    stats = asyncio.run(repo.create("notecard-9", "user-1", NOW))

    body = container.create_item.call_args.kwargs["body"]
    assert body["notecardId"] == "notecard-9"
    assert body["easinessFactor"] == 2.5
    assert body["intervalDays"] == 1
    assert body["nextReviewDate"] == "2025-12-13T09:00:00Z"
    assert stats.totalReviews == 0


def test_replace_writes_full_document(repo, container):
    container.replace_item.side_effect = lambda item, body: body
    stats = ReviewStats(**stats_doc(totalReviews=2, correctReviews=1))

    result = asyncio.run(repo.replace(stats))

    assert container.replace_item.call_args.kwargs["item"] == "stats-1"
    assert result == stats


def test_replace_missing_raises(repo, container):
    container.replace_item.side_effect = CosmosResourceNotFoundError(status_code=404, message="missing")

    with pytest.raises(ReviewStatsNotFoundError):
        asyncio.run(repo.replace(ReviewStats(**stats_doc())))


def test_delete_for_notecard(repo, container):
    container.query_items.return_value = iter([{"id": "stats-1"}])

    deleted = asyncio.run(repo.delete_for_notecard("notecard-1", "user-1"))

    assert deleted == 1
    container.delete_item.assert_called_once_with(item="stats-1", partition_key="user-1")
