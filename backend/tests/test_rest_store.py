"""
Tests for the hosted REST row store client.
"""
from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from focusboard.models.task import TaskPriority, TaskStatus
from focusboard.services.rest_store import RestRowStore
from focusboard.services.row_store import RowFilter, RowNotFoundError, RowStoreError


def _response(status_code=200, payload=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    response.text = text
    return response


@pytest.fixture
def rest_store():
    return RestRowStore(
        base_url="https://project.example.co/",
        api_key="anon-key",
        access_token="user-jwt",
        client=httpx.AsyncClient(),
    )


class TestRestRowStore:

    def test_requires_base_url(self):
        with patch("focusboard.services.rest_store.settings") as mock_settings:
            mock_settings.store_url = None
            with pytest.raises(RowStoreError):
                RestRowStore()

    @pytest.mark.asyncio
    async def test_select_builds_filter_params(self, rest_store):
        with patch.object(rest_store.client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = _response(payload=[{"id": "a", "title": "One"}])

            rows = await rest_store.select(
                "tasks",
                [RowFilter.eq("user_id", "u1"), RowFilter.neq("status", TaskStatus.COMPLETED)],
            )

            method, url = mock_request.call_args.args
            kwargs = mock_request.call_args.kwargs
            assert method == "GET"
            assert url == "https://project.example.co/rest/v1/tasks"
            assert kwargs["params"] == {"select": "*", "user_id": "eq.u1", "status": "neq.completed"}
            assert kwargs["headers"]["apikey"] == "anon-key"
            assert kwargs["headers"]["Authorization"] == "Bearer user-jwt"
            assert rows == [{"id": "a", "title": "One"}]

    @pytest.mark.asyncio
    async def test_insert_returns_representation(self, rest_store):
        with patch.object(rest_store.client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = _response(201, payload=[{"id": "uuid-1", "title": "New"}])

            row = await rest_store.insert(
                "tasks",
                {"title": "New", "priority": TaskPriority.HIGH, "due_date": date(2024, 1, 17)},
            )

            kwargs = mock_request.call_args.kwargs
            assert kwargs["json"] == [{"title": "New", "priority": "high", "due_date": "2024-01-17"}]
            assert kwargs["headers"]["Prefer"] == "return=representation"
            assert row == {"id": "uuid-1", "title": "New"}

    @pytest.mark.asyncio
    async def test_update_sends_only_given_fields(self, rest_store):
        with patch.object(rest_store.client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = _response(payload=[{"id": "uuid-1"}])

            await rest_store.update("tasks", "uuid-1", {"priority": TaskPriority.LOW, "due_date": None})

            method, _ = mock_request.call_args.args
            kwargs = mock_request.call_args.kwargs
            assert method == "PATCH"
            assert kwargs["params"] == {"id": "eq.uuid-1"}
            assert kwargs["json"] == {"priority": "low", "due_date": None}

    @pytest.mark.asyncio
    async def test_update_missing_row(self, rest_store):
        with patch.object(rest_store.client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = _response(payload=[])

            with pytest.raises(RowNotFoundError):
                await rest_store.update("tasks", "gone", {"priority": TaskPriority.LOW})

    @pytest.mark.asyncio
    async def test_http_error_status(self, rest_store):
        with patch.object(rest_store.client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = _response(500, text="boom")

            with pytest.raises(RowStoreError) as excinfo:
                await rest_store.delete("tasks", "uuid-1")
            assert excinfo.value.status_code == 500

    @pytest.mark.asyncio
    async def test_transport_error_is_wrapped(self, rest_store):
        with patch.object(rest_store.client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.side_effect = httpx.ConnectError("connection refused")

            with pytest.raises(RowStoreError):
                await rest_store.select("tasks")

    @pytest.mark.asyncio
    async def test_delete_asks_for_representation(self, rest_store):
        with patch.object(rest_store.client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = _response(payload=[{"id": "uuid-1"}])

            await rest_store.delete("tasks", "uuid-1")

            method, _ = mock_request.call_args.args
            kwargs = mock_request.call_args.kwargs
            assert method == "DELETE"
            assert kwargs["params"] == {"id": "eq.uuid-1"}
            assert kwargs["headers"]["Prefer"] == "return=representation"

    @pytest.mark.asyncio
    async def test_delete_missing_row(self, rest_store):
        with patch.object(rest_store.client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = _response(payload=[])

            with pytest.raises(RowNotFoundError):
                await rest_store.delete("tasks", "gone")
