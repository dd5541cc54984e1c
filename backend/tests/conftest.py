"""
Shared fixtures: a mocked row store and a board pinned to a fixed "today".
"""
from unittest.mock import AsyncMock

import pytest

from focusboard.services.quadrant_board import PersistenceFailurePolicy, QuadrantBoard
from tests.helpers import TODAY, USER_ID


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def mock_store():
    """Row store double; insert echoes the row back with a database id."""
    store = AsyncMock()
    store.select.return_value = []

    async def insert(table, row):
        return {**row, "id": f"db-{row['title']}"}

    store.insert.side_effect = insert
    return store


@pytest.fixture
def board(mock_store):
    return QuadrantBoard(mock_store, USER_ID, today=lambda: TODAY)


@pytest.fixture
def rollback_board(mock_store):
    return QuadrantBoard(
        mock_store,
        USER_ID,
        failure_policy=PersistenceFailurePolicy.ROLLBACK,
        today=lambda: TODAY,
    )
