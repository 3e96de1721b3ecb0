"""Tests for location path resolution and path helpers."""

import pytest

from src.exceptions import NoAccountsFoundError, ValidationError
from src.review_mcp_bridge.paths import (
    build_full_location_path,
    build_review_path,
    is_fully_qualified,
)
from src.review_mcp_bridge.resolver import LocationPathResolver


class TestLocationPathResolver:
    """Tests for LocationPathResolver.resolve()."""

    @pytest.mark.asyncio
    async def test_fully_qualified_passes_through(self, mock_executor):
        resolver = LocationPathResolver(mock_executor)

        path = await resolver.resolve("accounts/999/locations/456")

        assert path == "accounts/999/locations/456"
        mock_executor.get_first_account.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_resolving_twice_is_stable(self, mock_executor):
        resolver = LocationPathResolver(mock_executor)

        first = await resolver.resolve("locations/456")
        second = await resolver.resolve(first)

        assert first == second == "accounts/123/locations/456"
        assert mock_executor.get_first_account.await_count == 1

    @pytest.mark.asyncio
    async def test_short_form_always_looks_up_account(self, mock_executor):
        resolver = LocationPathResolver(mock_executor)

        await resolver.resolve("locations/456")
        await resolver.resolve("locations/456")

        assert mock_executor.get_first_account.await_count == 2

    @pytest.mark.asyncio
    async def test_whitespace_is_stripped(self, mock_executor):
        resolver = LocationPathResolver(mock_executor)

        assert await resolver.resolve("  locations/456 ") == "accounts/123/locations/456"

    @pytest.mark.asyncio
    async def test_empty_reference_rejected(self, mock_executor):
        resolver = LocationPathResolver(mock_executor)

        with pytest.raises(ValidationError) as exc_info:
            await resolver.resolve("   ")

        assert exc_info.value.field == "location_name"
        mock_executor.get_first_account.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_accounts_propagates(self, mock_executor):
        mock_executor.get_first_account.side_effect = NoAccountsFoundError()
        resolver = LocationPathResolver(mock_executor)

        with pytest.raises(NoAccountsFoundError):
            await resolver.resolve("locations/456")


class TestPathHelpers:
    """Tests for the pure path helpers."""

    def test_is_fully_qualified(self):
        assert is_fully_qualified("accounts/1/locations/2") is True
        assert is_fully_qualified("locations/2") is False

    def test_build_full_location_path(self):
        assert build_full_location_path("locations/2", "accounts/1") == "accounts/1/locations/2"
        assert build_full_location_path("locations/2", "accounts/1/") == "accounts/1/locations/2"
        assert (
            build_full_location_path("accounts/9/locations/2", "accounts/1")
            == "accounts/9/locations/2"
        )

    def test_build_review_path(self):
        assert (
            build_review_path("accounts/1/locations/2", "abc")
            == "accounts/1/locations/2/reviews/abc"
        )

    def test_build_review_path_keeps_full_review_name(self):
        name = "accounts/1/locations/2/reviews/abc"
        assert build_review_path("accounts/1/locations/2", name) == name

