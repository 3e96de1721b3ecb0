"""Tests for the authenticated request executor.

Tests the ApiRequestExecutor in src/review_mcp_bridge/api_client.py.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from conftest import make_response

from src.exceptions import (
    ApiRequestError,
    ApiTransportError,
    NoAccountsFoundError,
    NotAuthenticatedError,
)
from src.review_mcp_bridge.api_client import ApiRequestExecutor
from src.review_mcp_bridge.constants import (
    ACCOUNT_MANAGEMENT_API_BASE,
    BUSINESS_INFORMATION_API_BASE,
    REVIEWS_API_BASE,
)


@pytest.fixture
def token_manager():
    manager = MagicMock()
    manager.ensure_fresh = AsyncMock()
    manager.get_auth_headers.return_value = {"Authorization": "Bearer access-token"}
    return manager


@pytest.fixture
def executor(token_manager):
    return ApiRequestExecutor(token_manager, timeout=5.0)


class TestRequest:
    """Tests for the low-level request path."""

    @pytest.mark.asyncio
    async def test_get_success(self, executor, token_manager):
        with patch("httpx.AsyncClient") as mock_client:
            mock_instance = AsyncMock()
            mock_instance.request.return_value = make_response(200, {"reviews": []})
            mock_client.return_value.__aenter__.return_value = mock_instance

            result = await executor.get(
                "accounts/123/locations/456/reviews",
                params={"pageSize": 50, "pageToken": None},
            )

        assert result == {"reviews": []}
        token_manager.ensure_fresh.assert_awaited_once()
        mock_client.assert_called_once_with(timeout=5.0)

        call = mock_instance.request.call_args.kwargs
        assert call["method"] == "GET"
        assert call["url"] == f"{REVIEWS_API_BASE}/accounts/123/locations/456/reviews"
        assert call["params"] == {"pageSize": 50}
        assert call["headers"]["Authorization"] == "Bearer access-token"
        assert call["json"] is None

    @pytest.mark.asyncio
    async def test_put_sends_body(self, executor):
        with patch("httpx.AsyncClient") as mock_client:
            mock_instance = AsyncMock()
            mock_instance.request.return_value = make_response(
                200, {"comment": "Thanks", "updateTime": "2024-10-16T09:00:00Z"}
            )
            mock_client.return_value.__aenter__.return_value = mock_instance

            result = await executor.put(
                "accounts/1/locations/2/reviews/r1/reply", {"comment": "Thanks"}
            )

        call = mock_instance.request.call_args.kwargs
        assert call["method"] == "PUT"
        assert call["json"] == {"comment": "Thanks"}
        assert call["params"] is None
        assert result["updateTime"] == "2024-10-16T09:00:00Z"

    @pytest.mark.asyncio
    async def test_empty_body_returns_empty_dict(self, executor):
        with patch("httpx.AsyncClient") as mock_client:
            mock_instance = AsyncMock()
            mock_instance.request.return_value = make_response(204)
            mock_client.return_value.__aenter__.return_value = mock_instance

            result = await executor.post("some/path", {})

        assert result == {}

    @pytest.mark.asyncio
    async def test_error_status_raises_with_body(self, executor):
        with patch("httpx.AsyncClient") as mock_client:
            mock_instance = AsyncMock()
            mock_instance.request.return_value = make_response(
                404, text='{"error": {"message": "Requested entity was not found."}}'
            )
            mock_client.return_value.__aenter__.return_value = mock_instance

            with pytest.raises(ApiRequestError) as exc_info:
                await executor.get("accounts/1/locations/2/reviews")

        error = exc_info.value
        assert error.status_code == 404
        assert "Requested entity was not found." in error.body
        assert str(error).startswith("API request failed: 404")
        assert error.error_code == "API_REQUEST_FAILED"

    @pytest.mark.asyncio
    async def test_connection_error_translated(self, executor):
        with patch("httpx.AsyncClient") as mock_client:
            mock_instance = AsyncMock()
            mock_instance.request.side_effect = httpx.ConnectError("connection refused")
            mock_client.return_value.__aenter__.return_value = mock_instance

            with pytest.raises(ApiTransportError) as exc_info:
                await executor.get("accounts")

        assert "ConnectError" in str(exc_info.value)
        assert exc_info.value.error_code == "API_REQUEST_FAILED"

    @pytest.mark.asyncio
    async def test_timeout_translated(self, executor):
        with patch("httpx.AsyncClient") as mock_client:
            mock_instance = AsyncMock()
            mock_instance.request.side_effect = httpx.ReadTimeout("timed out")
            mock_client.return_value.__aenter__.return_value = mock_instance

            with pytest.raises(ApiTransportError):
                await executor.get("accounts")

    @pytest.mark.asyncio
    async def test_non_json_body_translated(self, executor):
        response = make_response(200, text="<html>oops</html>")
        response.json.side_effect = ValueError("Expecting value")

        with patch("httpx.AsyncClient") as mock_client:
            mock_instance = AsyncMock()
            mock_instance.request.return_value = response
            mock_client.return_value.__aenter__.return_value = mock_instance

            with pytest.raises(ApiTransportError) as exc_info:
                await executor.get("accounts")

        assert exc_info.value.status_code == 200

    @pytest.mark.asyncio
    async def test_auth_failure_stops_before_request(self, executor, token_manager):
        token_manager.ensure_fresh.side_effect = NotAuthenticatedError()

        with patch("httpx.AsyncClient") as mock_client:
            with pytest.raises(NotAuthenticatedError):
                await executor.get("accounts")

        mock_client.assert_not_called()


class TestAccountsAndLocations:
    """Tests for the account and location helpers."""

    @pytest.mark.asyncio
    async def test_get_first_account(self, executor):
        executor.get = AsyncMock(
            return_value={"accounts": [{"name": "accounts/1"}, {"name": "accounts/2"}]}
        )

        account = await executor.get_first_account()

        assert account == {"name": "accounts/1"}
        executor.get.assert_awaited_once_with(
            "accounts", params={"pageSize": 1}, base_url=ACCOUNT_MANAGEMENT_API_BASE
        )

    @pytest.mark.asyncio
    async def test_get_first_account_none(self, executor):
        executor.get = AsyncMock(return_value={})

        with pytest.raises(NoAccountsFoundError):
            await executor.get_first_account()

    @pytest.mark.asyncio
    async def test_list_accounts_follows_pages(self, executor):
        executor.get = AsyncMock(
            side_effect=[
                {"accounts": [{"name": "accounts/1"}], "nextPageToken": "p2"},
                {"accounts": [{"name": "accounts/2"}]},
            ]
        )

        accounts = await executor.list_accounts()

        assert [a["name"] for a in accounts] == ["accounts/1", "accounts/2"]
        second_params = executor.get.call_args_list[1].kwargs["params"]
        assert second_params["pageToken"] == "p2"

    @pytest.mark.asyncio
    async def test_list_account_locations(self, executor):
        executor.get = AsyncMock(return_value={"locations": [{"name": "locations/456"}]})

        locations = await executor.list_account_locations("accounts/1")

        assert locations == [{"name": "locations/456"}]
        call = executor.get.call_args
        assert call.args[0] == "accounts/1/locations"
        assert call.kwargs["base_url"] == BUSINESS_INFORMATION_API_BASE
        assert "readMask" in call.kwargs["params"]
