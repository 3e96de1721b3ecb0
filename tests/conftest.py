"""
Pytest configuration and shared fixtures for the review bridge tests.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.review_mcp_bridge.config import BridgeConfig
from src.review_mcp_bridge.models import OAuthTokenSet

# Fixed "now" used by the fake clock: 2024-10-15T12:00:00Z
NOW_SECONDS = 1_728_993_600.0
NOW_MS = int(NOW_SECONDS * 1000)


class FakeClock:
    """Controllable replacement for time.time()."""

    def __init__(self, now: float = NOW_SECONDS):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_response(status_code: int = 200, json_data=None, text: str = "") -> MagicMock:
    """Build a mock httpx.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = json_data if json_data is not None else {}
    response.text = text
    response.content = b"" if json_data is None and not text else b"{}"
    return response


def make_review(review_id: str, rating: str = "FIVE", replied: bool = False, **extra) -> dict:
    """Build a raw upstream review entry."""
    review = {
        "reviewId": review_id,
        "name": f"accounts/123/locations/456/reviews/{review_id}",
        "reviewer": {"displayName": f"Customer {review_id}"},
        "starRating": rating,
        "comment": f"Comment for {review_id}",
        "createTime": "2024-10-15T14:30:00Z",
        "updateTime": "2024-10-15T14:30:00Z",
    }
    if replied:
        review["reviewReply"] = {
            "comment": "Thank you!",
            "updateTime": "2024-10-16T09:00:00Z",
        }
    review.update(extra)
    return review


@pytest.fixture
def config():
    """Bridge configuration with test OAuth client credentials."""
    return BridgeConfig(
        google_client_id="client-id",
        google_client_secret="client-secret",
        google_redirect_uri="http://localhost:3000/auth/callback",
        http_timeout=5.0,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def valid_tokens():
    """Token set valid for another hour relative to the fake clock."""
    return OAuthTokenSet(
        access_token="access-token",
        refresh_token="refresh-token",
        scope="https://www.googleapis.com/auth/business.manage",
        expires_at=NOW_MS + 3_600_000,
    )


@pytest.fixture
def mock_executor():
    """ApiRequestExecutor stand-in with async methods."""
    executor = MagicMock()
    executor.get = AsyncMock()
    executor.put = AsyncMock()
    executor.post = AsyncMock()
    executor.get_first_account = AsyncMock(return_value={"name": "accounts/123"})
    executor.list_accounts = AsyncMock(return_value=[{"name": "accounts/123"}])
    executor.list_account_locations = AsyncMock(return_value=[])
    executor.get_location = AsyncMock(return_value={})
    return executor
